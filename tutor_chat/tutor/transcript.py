"""
Tutor Chat v1.0: Transcript Surface
The append-only chat transcript, specified against an abstract view so any
surface (terminal, GUI, test recorder) can host it.
"""

from typing import Optional, Protocol

from tutor_chat.state.session import RenderedMessage


class TranscriptView(Protocol):
    def append(self, message: RenderedMessage) -> int: ...
    def update_text(self, index: int, text: str) -> None: ...
    def add_images(self, index: int, images: list) -> None: ...
    def mark_playable(self, index: int) -> None: ...
    def show_thinking(self, text: str) -> None: ...
    def remove_thinking(self) -> None: ...
    def reset(self, greeting: RenderedMessage) -> None: ...
    def alert(self, text: str) -> None: ...


class Transcript:
    """
    In-memory transcript. Subclass and override the hooks to mirror changes
    onto a real surface; the stored state stays authoritative.
    """

    def __init__(self):
        self.messages: list[RenderedMessage] = []
        self.alerts: list[str] = []
        self.thinking: Optional[str] = None

    def append(self, message: RenderedMessage) -> int:
        self.messages.append(message)
        return len(self.messages) - 1

    def update_text(self, index: int, text: str) -> None:
        self.messages[index].displayed_text = text

    def add_images(self, index: int, images: list) -> None:
        self.messages[index].images.extend(images)

    def mark_playable(self, index: int) -> None:
        self.messages[index].playable = True

    def show_thinking(self, text: str) -> None:
        self.thinking = text

    def remove_thinking(self) -> None:
        self.thinking = None

    def reset(self, greeting: RenderedMessage) -> None:
        self.messages = [greeting]
        self.thinking = None

    def alert(self, text: str) -> None:
        self.alerts.append(text)

    @property
    def last(self) -> Optional[RenderedMessage]:
        return self.messages[-1] if self.messages else None
