"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

import threading
import time
from pathlib import Path

import numpy as np
import pytest

from voxline.engine import EngineSegment, EngineToken
from voxline.session import ResourceManager
from voxline.transcript import Transcript, Utterance


class FakeEngine:
    """Stands in for a loaded Whisper model.

    Returns canned segments, records every InferenceParams it sees, and
    tracks how many runs overlap.
    """

    def __init__(self, segments: list[EngineSegment] | None = None, delay: float = 0.0):
        self.segments = segments if segments is not None else []
        self.delay = delay
        self.calls: list = []
        self.active = 0
        self.max_active = 0
        self.closed = False
        self._counter_lock = threading.Lock()

    def run(self, samples, params, progress=None):
        with self._counter_lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            self.calls.append(params)
            if progress is not None:
                progress(0)
            if self.delay:
                time.sleep(self.delay)
            if progress is not None:
                progress(100)
            return list(self.segments)
        finally:
            with self._counter_lock:
                self.active -= 1

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def engine_segments() -> list[EngineSegment]:
    """Two segments with word tokens, including control tokens."""
    return [
        EngineSegment(
            text=" Hello there.",
            start=0,
            stop=150,
            tokens=[
                EngineToken(text="[_BEG_]", start=0, stop=0),
                EngineToken(text=" Hello", start=0, stop=60),
                EngineToken(text=" there.", start=60, stop=150),
            ],
        ),
        EngineSegment(
            text=" General Kenobi.",
            start=150,
            stop=300,
            tokens=[
                EngineToken(text=" General", start=150, stop=220),
                EngineToken(text=" Kenobi.", start=220, stop=300),
                EngineToken(text="[_TT_150]", start=300, stop=300),
            ],
        ),
    ]


@pytest.fixture
def fake_engine(engine_segments: list[EngineSegment]) -> FakeEngine:
    return FakeEngine(engine_segments)


@pytest.fixture
def manager(fake_engine: FakeEngine) -> ResourceManager:
    """A loaded ResourceManager wrapping the fake engine."""
    return ResourceManager("fake-model", lambda path: fake_engine).load()


@pytest.fixture
def fake_decoder():
    """Decoder returning one second of silence; records what it was given."""
    seen: list = []

    def decode(audio):
        seen.append(audio)
        return np.zeros(16000, dtype=np.float32)

    decode.seen = seen
    return decode


@pytest.fixture
def stub_decode(monkeypatch: pytest.MonkeyPatch, fake_decoder):
    """Replace FFmpeg decoding for code paths that use the default decoder."""
    monkeypatch.setattr("voxline.orchestrator.decode_audio", fake_decoder)
    return fake_decoder


@pytest.fixture
def sample_transcript() -> Transcript:
    return Transcript(
        utterances=[
            Utterance(text="hello", start=0, stop=150),
            Utterance(text="world", start=150, stop=300),
        ]
    )


@pytest.fixture
def audio_file(tmp_path: Path) -> Path:
    path = tmp_path / "speech.wav"
    path.write_bytes(b"RIFF fake wav content")
    return path


@pytest.fixture
def make_engine():
    """Factory for extra fake engines."""
    return FakeEngine
