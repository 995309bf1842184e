"""
voxline.models - Whisper model catalog.

Known model sizes, English-only detection, and resolution of a model
argument (size name or local path) into what the engine loader accepts.
"""

from __future__ import annotations

from pathlib import Path

MODEL_SIZES: tuple[str, ...] = (
    "tiny",
    "tiny.en",
    "base",
    "base.en",
    "small",
    "small.en",
    "medium",
    "medium.en",
    "large-v1",
    "large-v2",
    "large-v3",
)

DEFAULT_MODEL = "medium"


def is_english_only(model: str) -> bool:
    """Check whether a model size (or model directory name) is English-only.

    Args:
        model: Model size like "base.en" or a path whose final component names it

    Returns:
        True for the ".en" variants
    """
    return Path(str(model)).name.endswith(".en")


def resolve_model(model: str | Path) -> str:
    """Resolve a model argument for the engine loader.

    Args:
        model: Known size name or path to a converted model directory

    Returns:
        The size name unchanged, or the absolute path as a string

    Raises:
        ValueError: If the argument is neither a known size nor an existing path
    """
    name = str(model)
    if name in MODEL_SIZES:
        return name
    path = Path(name).expanduser()
    if path.exists():
        return str(path.resolve())
    raise ValueError(
        f"Unknown model '{name}'. Use one of: {', '.join(MODEL_SIZES)}, or a model directory"
    )
