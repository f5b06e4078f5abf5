"""
speakerscribe.transcribe - AI transcription engine.

Sends audio to a hosted multimodal model through litellm and parses the
speaker-labeled segments it returns.
"""
