"""
voxline.orchestrator - One end-to-end transcription.

Decodes the audio, configures and runs a single inference pass under the
ResourceManager's exclusive access, and assembles the engine output into
a Transcript.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

import numpy as np
from pydantic import ValidationError

from voxline.audio import decode_audio
from voxline.engine import EngineSegment, InferenceParams, ProgressSink, load_engine
from voxline.exceptions import (
    DecodeError,
    InferenceError,
    NoSpeechDetected,
    VoxlineError,
)
from voxline.languages import LanguageTag, engine_code
from voxline.session import ModelSession, ResourceManager
from voxline.transcript import Transcript, Utterance

logger = logging.getLogger(__name__)

CONTROL_TOKEN_PREFIX = "[_"

Decoder = Callable[[Path | bytes], np.ndarray]


def _no_progress(percent: int) -> None:
    pass


@dataclass(frozen=True)
class TranscriptionRequest:
    """Everything one transcription call needs."""

    audio: Path | bytes
    translate: bool = False
    word_timestamps: bool = False
    prompt: str | None = None
    language: LanguageTag | None = None
    progress_sink: ProgressSink = _no_progress

    def inference_params(self) -> InferenceParams:
        return InferenceParams(
            best_of=1,
            beam_size=1,
            translate=self.translate,
            token_timestamps=self.word_timestamps,
            initial_prompt=self.prompt or None,
            language=engine_code(self.language),
            print_special=False,
            print_progress=False,
            print_realtime=False,
            print_timestamps=False,
        )


def transcribe(
    manager: ResourceManager,
    audio: Path | bytes,
    translate: bool = False,
    word_timestamps: bool = False,
    prompt: str | None = None,
    language: LanguageTag | None = None,
    progress_sink: ProgressSink | None = None,
    decoder: Decoder | None = None,
) -> Transcript:
    """Transcribe audio with the manager's model.

    The progress sink is called synchronously on the thread running the
    inference with integer percentages; it must return quickly and do its
    own hand-off if another thread needs the values.

    Args:
        manager: Loaded ResourceManager guarding the model
        audio: Path to an audio file or its encoded bytes
        translate: Translate to English instead of transcribing
        word_timestamps: Also collect word-level utterances
        prompt: Initial prompt text for the decoder
        language: Language hint; None or AUTO lets the engine detect
        progress_sink: Receiver of percent-complete notifications
        decoder: Audio decode collaborator (FFmpeg by default)

    Returns:
        Transcript for the audio

    Raises:
        DecodeError: If the audio cannot be decoded
        SessionUnavailable: If the model session cannot be used
        NoSpeechDetected: If the engine emits no segments
        InferenceError: If the engine fails during the pass
    """
    request = TranscriptionRequest(
        audio=audio,
        translate=translate,
        word_timestamps=word_timestamps,
        prompt=prompt,
        language=language,
        progress_sink=progress_sink or _no_progress,
    )
    return run_request(manager, request, decoder=decoder)


def run_request(
    manager: ResourceManager,
    request: TranscriptionRequest,
    decoder: Decoder | None = None,
) -> Transcript:
    """Run a prepared TranscriptionRequest. See ``transcribe()``."""
    started = time.perf_counter()

    try:
        samples = (decoder or decode_audio)(request.audio)
    except DecodeError:
        raise
    except Exception as e:
        raise DecodeError(f"Could not decode audio: {e}") from e

    params = request.inference_params()

    def infer(session: ModelSession) -> list[EngineSegment]:
        logger.debug("Running inference with %s", session.model_path)
        try:
            return session.handle.run(samples, params, request.progress_sink)
        except VoxlineError:
            raise
        except Exception as e:
            raise InferenceError(f"Inference failed: {e}") from e

    segments = manager.with_session(infer)

    if not segments:
        raise NoSpeechDetected("No speech detected in audio")

    try:
        utterances = [Utterance(text=s.text, start=s.start, stop=s.stop) for s in segments]

        word_utterances = None
        if request.word_timestamps:
            word_utterances = [
                Utterance(text=t.text, start=t.start, stop=t.stop)
                for s in segments
                for t in s.tokens
                if not t.text.startswith(CONTROL_TOKEN_PREFIX)
            ]

        elapsed = timedelta(seconds=time.perf_counter() - started)
        transcript = Transcript(
            utterances=utterances,
            word_utterances=word_utterances,
            processing_time=elapsed,
        )
    except ValidationError as e:
        raise InferenceError(f"Engine returned inconsistent timing: {e}") from e

    logger.info("Transcribed %d segments in %.2fs", len(utterances), elapsed.total_seconds())
    return transcript


def transcribe_file(
    audio: Path | str,
    model_path: Path | str,
    prompt: str | None = None,
    response_format: str | None = None,
    language: LanguageTag | None = None,
) -> str:
    """Load a model, transcribe one file and render it.

    Args:
        audio: Path to the audio file
        model_path: Model size name or converted model directory
        prompt: Initial prompt text
        response_format: "srt", "vtt", otherwise plain text
        language: Language hint

    Returns:
        Rendered transcript
    """
    with ResourceManager(str(model_path), load_engine) as manager:
        transcript = transcribe(manager, Path(audio), prompt=prompt, language=language)
    return transcript.render(response_format or "text")
