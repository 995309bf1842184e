"""
voxline.engine - Whisper inference engine adapter.

Wraps a loaded faster-whisper model behind a small interface: one
``run()`` call takes decoded samples and an InferenceParams, blocks until
the whole pass is done, and returns segments (with optional word tokens)
timed in centiseconds.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from voxline.exceptions import DependencyError, ModelLoadError
from voxline.timecode import seconds_to_centiseconds

logger = logging.getLogger(__name__)

ProgressSink = Callable[[int], None]


@dataclass(frozen=True)
class InferenceParams:
    """Settings for one inference pass."""

    best_of: int = 1
    beam_size: int = 1
    translate: bool = False
    token_timestamps: bool = False
    initial_prompt: str | None = None
    language: str | None = None
    print_special: bool = False
    print_progress: bool = False
    print_realtime: bool = False
    print_timestamps: bool = False


@dataclass(frozen=True)
class EngineToken:
    text: str
    start: int
    stop: int


@dataclass(frozen=True)
class EngineSegment:
    text: str
    start: int
    stop: int
    tokens: list[EngineToken] = field(default_factory=list)


class WhisperEngine:
    """A loaded faster-whisper model.

    Not safe for concurrent use; callers go through a ResourceManager.
    """

    def __init__(self, model: Any, name: str):
        self._model = model
        self.name = name

    def run(
        self,
        samples: np.ndarray,
        params: InferenceParams,
        progress: ProgressSink | None = None,
    ) -> list[EngineSegment]:
        """Run one full inference pass.

        Progress is reported synchronously on this thread as integer percent
        of audio consumed.
        """
        _set_engine_verbosity(params)

        segments_iter, info = self._model.transcribe(
            samples,
            language=params.language,
            task="translate" if params.translate else "transcribe",
            beam_size=params.beam_size,
            best_of=params.best_of,
            initial_prompt=params.initial_prompt,
            word_timestamps=params.token_timestamps,
        )
        duration = float(getattr(info, "duration", 0.0) or 0.0)
        logger.debug(
            "Engine pass: language=%s duration=%.2fs",
            getattr(info, "language", None),
            duration,
        )

        segments: list[EngineSegment] = []
        last_percent = -1
        for seg in segments_iter:
            tokens = []
            if params.token_timestamps:
                for word in seg.words or []:
                    tokens.append(
                        EngineToken(
                            text=word.word,
                            start=seconds_to_centiseconds(word.start),
                            stop=seconds_to_centiseconds(word.end),
                        )
                    )
            segments.append(
                EngineSegment(
                    text=seg.text,
                    start=seconds_to_centiseconds(seg.start),
                    stop=seconds_to_centiseconds(seg.end),
                    tokens=tokens,
                )
            )

            if progress is not None and duration > 0:
                percent = min(100, int(seg.end / duration * 100))
                if percent > last_percent:
                    progress(percent)
                    last_percent = percent

        if progress is not None and last_percent < 100:
            progress(100)

        return segments

    def close(self) -> None:
        self._model = None


def _set_engine_verbosity(params: InferenceParams) -> None:
    """Route the engine's own diagnostic output through logging levels.

    Debug logging (``--verbose``) always wins: the engine logger then
    inherits the root level.
    """
    chatty = (
        params.print_special
        or params.print_progress
        or params.print_realtime
        or params.print_timestamps
    )
    engine_logger = logging.getLogger("faster_whisper")
    if chatty:
        engine_logger.setLevel(logging.DEBUG)
    elif logging.getLogger().isEnabledFor(logging.DEBUG):
        engine_logger.setLevel(logging.NOTSET)
    else:
        engine_logger.setLevel(logging.WARNING)


def load_engine(
    model: str,
    device: str = "auto",
    compute_type: str = "default",
    cpu_threads: int = 0,
) -> WhisperEngine:
    """Load a Whisper model.

    Args:
        model: Model size name (downloaded and cached on first use) or path to a
            converted model directory
        device: "auto", "cpu" or "cuda"
        compute_type: CTranslate2 compute type ("default", "int8", "float16", ...)
        cpu_threads: Threads for CPU inference (0 lets the engine decide)

    Returns:
        Loaded WhisperEngine

    Raises:
        DependencyError: If faster-whisper is not installed
        ModelLoadError: If the model cannot be loaded
    """
    try:
        from faster_whisper import WhisperModel
    except ImportError as e:
        raise DependencyError(
            "faster-whisper",
            "not installed",
            install_hint="pip install faster-whisper",
        ) from e

    logger.info("Loading Whisper model %s (device=%s, compute=%s)", model, device, compute_type)
    try:
        handle = WhisperModel(
            model,
            device=device,
            compute_type=compute_type,
            cpu_threads=cpu_threads,
        )
    except Exception as e:
        raise ModelLoadError(f"Failed to load model '{model}': {e}") from e

    return WhisperEngine(handle, name=model)
