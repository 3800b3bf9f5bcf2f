"""
Tutor Chat v1.0: Response Renderer

Reveals an assistant reply one grapheme at a time at a fixed step delay, so the
transcript fills in visibly. Total reveal time is len(units) × step_delay and
every published state is a strictly longer prefix of the final text.

The reveal runs as a cancellable asyncio task. Cancelling stops further steps
and leaves the partial text where it is. Images and the playback control are
attached only after the full text is shown.
"""

import asyncio
import logging
import unicodedata
from typing import Awaitable, Callable, Iterable, Optional

from tutor_chat.config import RENDER_STEP_MS
from tutor_chat.state.session import RenderedMessage, Role
from tutor_chat.tutor.transcript import TranscriptView

logger = logging.getLogger(__name__)

_ZWJ = "\u200d"
_JOINERS = {_ZWJ, "\ufe0e", "\ufe0f"}


def _is_regional_indicator(ch: str) -> bool:
    return "\U0001F1E6" <= ch <= "\U0001F1FF"


def _extends(ch: str) -> bool:
    """True if ch attaches to the previous character instead of standing alone."""
    if ch in _JOINERS:
        return True
    if "\U0001F3FB" <= ch <= "\U0001F3FF":  # skin tone modifiers
        return True
    return unicodedata.category(ch) in ("Mn", "Mc", "Me")


def split_units(text: str) -> list[str]:
    """
    Split text into reveal units that never break a visible character:
    combining marks, ZWJ emoji sequences, flag pairs and CRLF stay together.
    """
    units: list[str] = []
    for ch in text or "":
        if units:
            prev = units[-1]
            if (
                _extends(ch)
                or prev.endswith(_ZWJ)
                or (prev == "\r" and ch == "\n")
                or (
                    _is_regional_indicator(ch)
                    and _is_regional_indicator(prev[-1])
                    and len(prev) == 1
                )
            ):
                units[-1] = prev + ch
                continue
        units.append(ch)
    return units


class RevealTask:
    """Handle on one running reveal."""

    def __init__(self, task: asyncio.Task, index: int):
        self._task = task
        self.index = index

    def cancel(self) -> bool:
        return self._task.cancel()

    def done(self) -> bool:
        return self._task.done()

    def cancelled(self) -> bool:
        return self._task.cancelled()

    async def wait(self) -> Optional[RenderedMessage]:
        """Wait for the reveal to settle. Returns None if it was cancelled."""
        await asyncio.wait({self._task})
        if self._task.cancelled():
            return None
        return self._task.result()


class ResponseRenderer:
    def __init__(
        self,
        view: TranscriptView,
        step_delay: float = RENDER_STEP_MS / 1000,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.view = view
        self.step_delay = step_delay
        self._sleep = sleep
        self._active: Optional[RevealTask] = None

    @property
    def active(self) -> Optional[RevealTask]:
        """The reveal still in progress, if any."""
        if self._active is not None and self._active.done():
            self._active = None
        return self._active

    def render(self, text: str, images: Iterable[str] = ()) -> RevealTask:
        """
        Append an empty assistant message and start revealing text into it.
        Must be called from a running event loop, never while another reveal
        is in progress.
        """
        if self.active is not None:
            raise RuntimeError("a reveal is already in progress")

        index = self.view.append(RenderedMessage(role=Role.ASSISTANT))
        units = split_units(text)
        task = asyncio.get_running_loop().create_task(
            self._reveal(index, units, list(images)),
        )
        self._active = RevealTask(task, index)
        logger.debug(f"Reveal started: {len(units)} units at {self.step_delay * 1000:.0f}ms")
        return self._active

    async def _reveal(self, index: int, units: list[str], images: list[str]) -> RenderedMessage:
        shown = ""
        try:
            for unit in units:
                shown += unit
                self.view.update_text(index, shown)
                await self._sleep(self.step_delay)
        except asyncio.CancelledError:
            logger.info(f"Reveal cancelled at {len(shown)} chars")
            raise

        if images:
            self.view.add_images(index, images)
        self.view.mark_playable(index)
        return RenderedMessage(
            role=Role.ASSISTANT, displayed_text=shown, images=images, playable=True,
        )
