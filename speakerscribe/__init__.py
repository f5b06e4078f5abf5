"""
Speakerscribe - speaker-labeled transcription for M4A recordings.

Uploads an M4A file to a transcription proxy, which asks a hosted AI model
for a speaker-attributed transcript, then renders the result and exports it
as SRT subtitles.
"""

__version__ = "0.1.0"
