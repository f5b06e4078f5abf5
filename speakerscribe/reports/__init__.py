"""
speakerscribe.reports - HTML transcript reports.
"""

from speakerscribe.reports.transcript import generate_transcript_report

__all__ = ["generate_transcript_report"]
