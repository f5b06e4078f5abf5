"""
speakerscribe.export - Subtitle export.

Converts speaker-labeled transcripts to SRT subtitle documents.
"""
