"""
voxline.audio - FFmpeg audio decoding.

Decodes any container/codec FFmpeg understands into the mono 16 kHz
float32 samples the Whisper engine consumes.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

import numpy as np

from voxline.exceptions import DecodeError, DependencyError

logger = logging.getLogger(__name__)

SAMPLE_RATE = 16000


def ffmpeg_binary() -> str:
    """Locate the ffmpeg executable.

    Raises:
        DependencyError: If ffmpeg is not on PATH
    """
    path = shutil.which("ffmpeg")
    if path is None:
        raise DependencyError(
            "ffmpeg",
            "not found on PATH",
            install_hint="brew install ffmpeg / apt install ffmpeg",
        )
    return path


def decode_audio(audio: Path | str | bytes, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Decode audio to mono float32 samples in [-1, 1].

    Args:
        audio: Path to an audio/video file, or the raw encoded bytes
        sample_rate: Output sample rate (16kHz for Whisper)

    Returns:
        1-D float32 array of samples

    Raises:
        DecodeError: If the input is missing, unreadable or yields no audio
    """
    if isinstance(audio, (bytes, bytearray)):
        source = "pipe:0"
        stdin = bytes(audio)
    else:
        path = Path(audio)
        if not path.exists():
            raise DecodeError(f"Audio file not found: {path}")
        source = str(path)
        stdin = None

    cmd = [ffmpeg_binary(), "-hide_banner"]
    if stdin is None:
        cmd.append("-nostdin")
    cmd += [
        "-threads",
        "0",
        "-i",
        source,
        "-vn",
        "-f",
        "s16le",
        "-acodec",
        "pcm_s16le",
        "-ac",
        "1",
        "-ar",
        str(sample_rate),
        "pipe:1",
    ]

    try:
        proc = subprocess.run(cmd, input=stdin, capture_output=True)
    except OSError as e:
        raise DecodeError(f"Could not run ffmpeg: {e}") from e

    if proc.returncode != 0:
        stderr = proc.stderr.decode("utf-8", errors="replace").strip()
        detail = stderr.splitlines()[-1] if stderr else "unknown error"
        raise DecodeError(f"FFmpeg decode failed: {detail}")

    samples = np.frombuffer(proc.stdout, dtype=np.int16).astype(np.float32) / 32768.0
    if samples.size == 0:
        raise DecodeError("Decoded audio is empty")

    logger.debug(
        "Decoded %d samples (%.2fs) from %s", samples.size, samples.size / sample_rate, source
    )
    return samples
