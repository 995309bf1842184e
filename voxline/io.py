"""
voxline.io - Atomic text writes and upload staging.

Centralized file I/O for transcript outputs and HTTP uploads.
"""

from __future__ import annotations

import tempfile
import uuid
from pathlib import Path


def write_text(path: Path, content: str) -> None:
    """Write text file atomically.

    Writes to a temp file first, then renames to prevent corruption
    on interruption.

    Args:
        path: Destination path
        content: Text content to write
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        suffix=".tmp",
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(content)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
    tmp_path.replace(path)


def sibling_path(audio: Path, extension: str) -> Path:
    """Output path beside the audio, keeping its full name: a.mp3 -> a.mp3.srt."""
    return audio.with_name(f"{audio.name}.{extension}")


def write_transcript_files(audio: Path, renderings: dict[str, str]) -> list[Path]:
    """Write each rendering beside the audio file.

    Args:
        audio: Source audio path
        renderings: Mapping of extension ("txt", "srt", ...) to content

    Returns:
        Paths written, in mapping order
    """
    written = []
    for extension, content in renderings.items():
        out = sibling_path(audio, extension)
        write_text(out, content)
        written.append(out)
    return written


def upload_path(directory: Path, filename: str | None) -> Path:
    """Unique storage path for an upload inside a request's directory.

    The client filename only contributes its extension; the stem is a fresh
    uuid so concurrent uploads never collide.
    """
    suffix = Path(filename).suffix if filename else ""
    if not suffix or len(suffix) > 10 or not suffix[1:].isalnum():
        suffix = ".bin"
    return directory / f"{uuid.uuid4().hex}{suffix}"
