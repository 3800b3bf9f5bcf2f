"""
Tutor Chat v1.0: Error Taxonomy

Every failure surface originates in the dispatcher or the voice bridge.
SessionController catches these and maps each kind to one user-visible message.
"""

from typing import Optional


class TutorChatError(Exception):
    """Base class for all client-side failures."""


# ─── Dispatch ────────────────────────────────────────────────────────────────

class BusyError(TutorChatError):
    """A chat request is already in flight."""


class UnauthorizedError(TutorChatError):
    """Backend answered 401, or there is no credential to send."""


class RejectedError(TutorChatError):
    """Backend answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UnreachableError(TutorChatError):
    """No response was received (connection failure, timeout)."""


class EmptyInputError(TutorChatError):
    """Nothing to submit: no text, no image and no course context."""


# ─── Voice ───────────────────────────────────────────────────────────────────

class UnsupportedError(TutorChatError):
    """The host offers no speech capability."""


class AlreadyListeningError(TutorChatError):
    """A capture session is already running."""


class CaptureError(TutorChatError):
    """The speech engine reported an error instead of a transcript."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class NothingToReadError(TutorChatError):
    """Playback requested but there is no text to speak."""


class NothingSpeakableError(NothingToReadError):
    """There is text, but nothing left to say once markup and emoji are removed."""
