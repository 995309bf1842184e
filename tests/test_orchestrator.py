"""Tests for voxline.orchestrator module."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from voxline.engine import EngineSegment
from voxline.exceptions import (
    DecodeError,
    InferenceError,
    NoSpeechDetected,
    SessionUnavailable,
)
from voxline.languages import LanguageTag
from voxline.orchestrator import TranscriptionRequest, run_request, transcribe, transcribe_file
from voxline.session import ResourceManager


class TestTranscribe:
    def test_segments_become_utterances(self, manager, fake_decoder, audio_file) -> None:
        transcript = transcribe(manager, audio_file, decoder=fake_decoder)

        assert [(u.text, u.start, u.stop) for u in transcript.utterances] == [
            (" Hello there.", 0, 150),
            (" General Kenobi.", 150, 300),
        ]
        assert transcript.as_text() == "Hello there. General Kenobi."
        assert fake_decoder.seen == [audio_file]

    def test_utterance_invariants(self, manager, fake_decoder, audio_file) -> None:
        utterances = transcribe(manager, audio_file, decoder=fake_decoder).utterances
        assert len(utterances) >= 1
        for u in utterances:
            assert u.start <= u.stop
        for prev, cur in zip(utterances, utterances[1:]):
            assert prev.start <= cur.start

    def test_word_utterances_absent_unless_requested(
        self, manager, fake_decoder, audio_file
    ) -> None:
        transcript = transcribe(manager, audio_file, word_timestamps=False, decoder=fake_decoder)
        assert transcript.word_utterances is None

    def test_word_utterances_skip_control_tokens(
        self, manager, fake_decoder, audio_file
    ) -> None:
        transcript = transcribe(manager, audio_file, word_timestamps=True, decoder=fake_decoder)

        words = transcript.word_utterances
        assert words is not None
        assert [w.text for w in words] == [" Hello", " there.", " General", " Kenobi."]
        assert not any(w.text.startswith("[_") for w in words)

    def test_word_utterances_empty_when_no_tokens(
        self, fake_decoder, audio_file, make_engine
    ) -> None:
        engine = make_engine([EngineSegment(text="hi", start=0, stop=10)])
        manager = ResourceManager("m", lambda path: engine).load()
        transcript = transcribe(manager, audio_file, word_timestamps=True, decoder=fake_decoder)
        assert transcript.word_utterances == ()

    def test_processing_time_recorded(self, manager, fake_decoder, audio_file) -> None:
        transcript = transcribe(manager, audio_file, decoder=fake_decoder)
        assert transcript.processing_time > timedelta(0)

    def test_bytes_input(self, manager, fake_decoder) -> None:
        transcribe(manager, b"encoded audio", decoder=fake_decoder)
        assert fake_decoder.seen == [b"encoded audio"]

    def test_default_decoder_is_used(self, manager, stub_decode, audio_file) -> None:
        transcribe(manager, audio_file)
        assert stub_decode.seen == [audio_file]


class TestInferenceParams:
    def test_defaults(self, manager, fake_engine, fake_decoder, audio_file) -> None:
        transcribe(manager, audio_file, decoder=fake_decoder)

        params = fake_engine.calls[0]
        assert params.best_of == 1
        assert params.beam_size == 1
        assert params.translate is False
        assert params.token_timestamps is False
        assert params.initial_prompt is None
        assert params.language is None
        assert not (
            params.print_special
            or params.print_progress
            or params.print_realtime
            or params.print_timestamps
        )

    def test_options_forwarded(self, manager, fake_engine, fake_decoder, audio_file) -> None:
        transcribe(
            manager,
            audio_file,
            translate=True,
            word_timestamps=True,
            prompt="Kenobi, Grievous",
            language=LanguageTag.GERMAN,
            decoder=fake_decoder,
        )

        params = fake_engine.calls[0]
        assert params.translate is True
        assert params.token_timestamps is True
        assert params.initial_prompt == "Kenobi, Grievous"
        assert params.language == "de"

    def test_auto_language_means_detect(self) -> None:
        request = TranscriptionRequest(audio=Path("a.wav"), language=LanguageTag.AUTO)
        assert request.inference_params().language is None

    def test_empty_prompt_not_injected(self) -> None:
        request = TranscriptionRequest(audio=Path("a.wav"), prompt="")
        assert request.inference_params().initial_prompt is None


class TestProgress:
    def test_sink_receives_percentages(self, manager, fake_decoder, audio_file) -> None:
        seen = []
        transcribe(manager, audio_file, progress_sink=seen.append, decoder=fake_decoder)
        assert seen == [0, 100]

    def test_sink_runs_on_calling_thread(self, manager, fake_decoder, audio_file) -> None:
        import threading

        threads = set()
        transcribe(
            manager,
            audio_file,
            progress_sink=lambda p: threads.add(threading.get_ident()),
            decoder=fake_decoder,
        )
        assert threads == {threading.get_ident()}


class TestErrors:
    def test_zero_segments(self, fake_decoder, audio_file, make_engine) -> None:
        manager = ResourceManager("m", lambda path: make_engine([])).load()
        with pytest.raises(NoSpeechDetected):
            transcribe(manager, audio_file, decoder=fake_decoder)

    def test_decode_error_passes_through(self, manager, fake_engine, audio_file) -> None:
        def bad_decoder(audio):
            raise DecodeError("not audio")

        with pytest.raises(DecodeError, match="not audio"):
            transcribe(manager, audio_file, decoder=bad_decoder)
        assert fake_engine.calls == []

    def test_unexpected_decode_failure_wrapped(self, manager, audio_file) -> None:
        def bad_decoder(audio):
            raise OSError("disk gone")

        with pytest.raises(DecodeError, match="disk gone"):
            transcribe(manager, audio_file, decoder=bad_decoder)

    def test_engine_failure_wrapped(self, fake_decoder, audio_file) -> None:
        class Exploding:
            def run(self, samples, params, progress=None):
                raise RuntimeError("ggml assert")

        manager = ResourceManager("m", lambda path: Exploding()).load()
        with pytest.raises(InferenceError, match="ggml assert"):
            transcribe(manager, audio_file, decoder=fake_decoder)

    def test_inconsistent_engine_timing(self, fake_decoder, audio_file, make_engine) -> None:
        segments = [
            EngineSegment(text="later", start=500, stop=600),
            EngineSegment(text="earlier", start=0, stop=100),
        ]
        manager = ResourceManager("m", lambda path: make_engine(segments)).load()
        with pytest.raises(InferenceError, match="inconsistent timing"):
            transcribe(manager, audio_file, decoder=fake_decoder)

    def test_session_unavailable(self, fake_decoder, audio_file) -> None:
        manager = ResourceManager("m", lambda path: object())
        with pytest.raises(SessionUnavailable):
            transcribe(manager, audio_file, decoder=fake_decoder)


class TestRunRequest:
    def test_prepared_request(self, manager, fake_decoder, audio_file) -> None:
        request = TranscriptionRequest(audio=audio_file, word_timestamps=True)
        transcript = run_request(manager, request, decoder=fake_decoder)
        assert transcript.word_utterances is not None
        assert transcript.word_utterances[0].text == " Hello"
        assert transcript.word_utterances[0].start == 0
        assert transcript.word_utterances[0].stop == 60


class TestTranscribeFile:
    @pytest.fixture
    def loaded(self, monkeypatch: pytest.MonkeyPatch, fake_engine, stub_decode) -> list:
        paths = []

        def loader(model_path):
            paths.append(model_path)
            return fake_engine

        monkeypatch.setattr("voxline.orchestrator.load_engine", loader)
        return paths

    def test_defaults_to_text(self, loaded, fake_engine, audio_file) -> None:
        out = transcribe_file(audio_file, "small")
        assert out == "Hello there. General Kenobi."
        assert loaded == ["small"]
        assert fake_engine.closed

    def test_srt(self, loaded, audio_file) -> None:
        out = transcribe_file(str(audio_file), "small", response_format="srt")
        assert out.startswith("1\n00:00:00,000 --> 00:00:01,500\nHello there.\n\n")

    def test_prompt_and_language(self, loaded, fake_engine, audio_file) -> None:
        transcribe_file(audio_file, "small", prompt="Kenobi", language=LanguageTag.ITALIAN)
        assert fake_engine.calls[0].initial_prompt == "Kenobi"
        assert fake_engine.calls[0].language == "it"
