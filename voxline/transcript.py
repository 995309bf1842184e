"""
voxline.transcript - Transcript model and subtitle formatters.

A Transcript holds segment-level utterances (and optionally word-level
ones) with centisecond timing, and renders them as plain text, SRT or
WebVTT. Renderers only ever read segment-level utterances.
"""

from __future__ import annotations

from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from voxline.timecode import srt_timestamp, vtt_timestamp

TEXT_SEPARATOR = " "


class Utterance(BaseModel):
    """A span of recognized speech; times are centiseconds."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    text: str
    start: int = Field(..., ge=0)
    stop: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_span(self) -> Utterance:
        if self.start > self.stop:
            raise ValueError(f"start ({self.start}) must not exceed stop ({self.stop})")
        return self


class Transcript(BaseModel):
    """Immutable result of one transcription."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    utterances: tuple[Utterance, ...]
    word_utterances: tuple[Utterance, ...] | None = None
    processing_time: timedelta = timedelta(0)

    @field_validator("utterances")
    @classmethod
    def validate_utterances(cls, v: tuple[Utterance, ...]) -> tuple[Utterance, ...]:
        if not v:
            raise ValueError("A transcript needs at least one utterance")
        for prev, cur in zip(v, v[1:]):
            if cur.start < prev.start:
                raise ValueError(
                    f"Utterances out of order: {cur.start} starts before {prev.start}"
                )
        return v

    def as_text(self) -> str:
        """Plain transcript: stripped utterance texts joined by one space."""
        parts = (u.text.strip() for u in self.utterances)
        return TEXT_SEPARATOR.join(p for p in parts if p)

    def as_srt(self) -> str:
        """Render as SubRip; cue indices start at 1 on every call."""
        blocks = []
        for index, u in enumerate(self.utterances, start=1):
            blocks.append(
                f"{index}\n"
                f"{srt_timestamp(u.start)} --> {srt_timestamp(u.stop)}\n"
                f"{u.text.strip()}\n\n"
            )
        return "".join(blocks)

    def as_vtt(self) -> str:
        """Render as WebVTT."""
        blocks = ["WEBVTT\n\n"]
        for u in self.utterances:
            blocks.append(
                f"{vtt_timestamp(u.start)} --> {vtt_timestamp(u.stop)}\n{u.text.strip()}\n\n"
            )
        return "".join(blocks)

    def render(self, response_format: str | None) -> str:
        """Render by format name: "srt", "vtt", anything else plain text."""
        if response_format == "srt":
            return self.as_srt()
        if response_format == "vtt":
            return self.as_vtt()
        return self.as_text()
