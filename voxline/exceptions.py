"""
voxline.exceptions - Custom exception classes.

All Voxline-specific exceptions inherit from VoxlineError.
"""


class VoxlineError(Exception):
    """Base exception for all Voxline errors."""

    pass


class ConfigError(VoxlineError):
    """Configuration loading or validation error."""

    pass


class ModelLoadError(VoxlineError):
    """Model could not be loaded; the session never becomes usable."""

    pass


class SessionUnavailable(VoxlineError):
    """Resource manager could not grant access to its model session."""

    pass


class DecodeError(VoxlineError):
    """Input audio is unreadable or unsupported."""

    pass


class InferenceError(VoxlineError):
    """Engine reported a failure during inference."""

    pass


class NoSpeechDetected(VoxlineError):
    """Engine emitted zero segments for the input audio."""

    pass


class BadRequest(VoxlineError):
    """Malformed HTTP input (wrong content type, missing part)."""

    pass


class InternalError(VoxlineError):
    """Unexpected I/O or parse failure while handling a request."""

    pass


class PreconditionError(VoxlineError):
    """CLI precondition violated (missing file, language/model mismatch)."""

    pass


class DependencyError(VoxlineError):
    """Required dependency missing or misconfigured."""

    def __init__(self, dependency: str, message: str, install_hint: str | None = None):
        self.dependency = dependency
        self.message = message
        self.install_hint = install_hint
        super().__init__(f"{dependency}: {message}")
