"""
voxline.session - Exclusive access to a loaded model.

The Whisper engine keeps mutable decoder state, so a loaded model must
never run two inferences at once. ResourceManager owns exactly one
ModelSession and only hands it out inside ``with_session()``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from voxline.exceptions import ModelLoadError, SessionUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ModelSession:
    """A loaded model and where it came from."""

    model_path: str
    handle: Any

    def close(self) -> None:
        close = getattr(self.handle, "close", None)
        if callable(close):
            close()
        self.handle = None


class ResourceManager:
    """Serializes access to one model session.

    ``loader`` is called once by ``load()`` and must return the engine handle
    for ``model_path``. Separate managers can wrap separate models to run in
    parallel; a single manager never runs two callables at once.
    """

    def __init__(self, model_path: str, loader: Callable[[str], Any]):
        self.model_path = model_path
        self._loader = loader
        self._session: ModelSession | None = None
        self._load_error: Exception | None = None
        self._lock = threading.Lock()
        self._owner: int | None = None

    @property
    def ready(self) -> bool:
        return self._session is not None

    def load(self) -> ResourceManager:
        """Load the model. Safe to call again once loaded.

        Raises:
            ModelLoadError: If the loader fails; the manager stays unusable
        """
        with self._lock:
            if self._session is not None:
                return self
            if self._load_error is not None:
                raise ModelLoadError(self._unavailable_reason())

            logger.info("Loading model session for %s", self.model_path)
            try:
                handle = self._loader(self.model_path)
            except ModelLoadError as e:
                self._load_error = e
                raise
            except Exception as e:
                self._load_error = e
                raise ModelLoadError(f"Failed to load {self.model_path}: {e}") from e

            self._session = ModelSession(model_path=self.model_path, handle=handle)
        return self

    def with_session(self, fn: Callable[[ModelSession], T]) -> T:
        """Run ``fn`` with exclusive access to the session.

        Blocks until any current holder releases. The result of ``fn`` is
        returned and its exceptions propagate unchanged.

        Raises:
            SessionUnavailable: If the model is not loaded, or the calling
                thread already holds the session
        """
        me = threading.get_ident()
        if self._owner == me:
            raise SessionUnavailable("Session is already held by this caller")
        if self._session is None:
            raise SessionUnavailable(self._unavailable_reason())

        with self._lock:
            session = self._session
            if session is None:
                raise SessionUnavailable(self._unavailable_reason())
            self._owner = me
            try:
                return fn(session)
            finally:
                self._owner = None

    def close(self) -> None:
        """Release the model. The manager cannot be used afterwards."""
        with self._lock:
            if self._session is not None:
                logger.info("Closing model session for %s", self.model_path)
                self._session.close()
                self._session = None

    def _unavailable_reason(self) -> str:
        if self._load_error is not None:
            return f"Model {self.model_path} failed to load: {self._load_error}"
        return f"Model {self.model_path} is not loaded"

    def __enter__(self) -> ResourceManager:
        return self.load()

    def __exit__(self, *exc_info) -> None:
        self.close()
