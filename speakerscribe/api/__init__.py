"""
speakerscribe.api - Transcription proxy HTTP application.

Exposes the transcription, blob upload and health endpoints the client
talks to.
"""

from speakerscribe.api.app import create_app

__all__ = ["create_app"]
