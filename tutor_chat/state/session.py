"""
Tutor Chat v1.0: Session State Schema

Exactly one Session exists per client lifetime and SessionController owns it.
Every other component reads from it and returns new values instead of writing
to it.

Field rules:
- auth_token: Set at login (external). Cleared at logout and on a 401.
- course / lesson: Mirrors of the stored activeCourse / activeLesson keys,
  refreshed right before a question is composed.
- pending_image: Cleared once a successful reply consumes it, and on clear.
- is_sending: True iff a chat request is in flight.
- last_rendered_answer: Text of the most recently completed assistant message.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class Session:
    # ─── Identity ────────────────────────────────────────────────────────────
    auth_token: Optional[str] = None

    # ─── Learning context ────────────────────────────────────────────────────
    course: Optional[str] = None
    lesson: Optional[str] = None

    # ─── Turn state ──────────────────────────────────────────────────────────
    pending_image: Optional[str] = None  # data URL
    is_sending: bool = False
    last_rendered_answer: Optional[str] = None

    @property
    def has_context(self) -> bool:
        """True when a course (with or without a lesson) is selected."""
        return bool(self.course)

    def reset(self) -> None:
        """Drop everything tied to the logged-in user."""
        self.auth_token = None
        self.course = None
        self.lesson = None
        self.pending_image = None
        self.last_rendered_answer = None

    def to_dict(self) -> dict:
        """Serialize for logging. The token is never included."""
        return {
            "authenticated": self.auth_token is not None,
            "course": self.course,
            "lesson": self.lesson,
            "has_pending_image": self.pending_image is not None,
            "is_sending": self.is_sending,
            "has_answer": self.last_rendered_answer is not None,
        }


@dataclass
class Turn:
    """One user submission. Consumed immediately, never persisted."""
    user_text: str = ""
    attached_image: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.user_text or "").strip() and not self.attached_image


@dataclass(frozen=True)
class ComposedQuestion:
    text: str
    image: Optional[str] = None
    course: Optional[str] = None
    lesson: Optional[str] = None


@dataclass
class RenderedMessage:
    """
    One transcript entry. The transcript is append-only; after the reveal
    finishes only the trailing playback control may change.
    """
    role: Role
    displayed_text: str = ""
    images: list = field(default_factory=list)
    playable: bool = False
