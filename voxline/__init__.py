"""
Voxline - local speech-to-text transcription.

Loads a Whisper model once and serves transcriptions over a CLI and an
OpenAI-compatible HTTP endpoint, rendering results as plain text, SRT,
WebVTT or JSON.
"""

__version__ = "0.1.0"
