"""
Tutor Chat v1.0: Voice Bridge
Speech-to-text capture and text-to-speech playback behind one capability
interface. Independent of chat state.

Two state machines:
- Playback: IDLE ⇄ SPEAKING. speak() interrupts any running utterance.
- Capture:  IDLE → LISTENING → IDLE. Exclusive, no mid-listen cancel.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

from tutor_chat.config import SPEECH_LANGUAGE, SPEECH_PITCH, SPEECH_RATE
from tutor_chat.errors import (
    AlreadyListeningError, CaptureError, NothingSpeakableError, NothingToReadError,
    UnsupportedError,
)
from tutor_chat.voice.clean_for_speech import clean_for_speech

logger = logging.getLogger(__name__)


class PlaybackState(str, Enum):
    IDLE = "idle"
    SPEAKING = "speaking"


class CaptureState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"


@dataclass(frozen=True)
class Utterance:
    text: str
    language: str = SPEECH_LANGUAGE
    rate: float = SPEECH_RATE
    pitch: float = SPEECH_PITCH


class SpeechEngine(Protocol):
    """
    Host speech capability. Engines call back exactly once per capture
    (on_result or on_error) and once per utterance (on_end), from any thread.
    An engine without playback raises UnsupportedError from speak().
    """

    def is_supported(self) -> bool: ...

    def start_capture(
        self,
        language: str,
        on_result: Callable[[str], None],
        on_error: Callable[[str], None],
    ) -> None: ...

    def speak(self, utterance: Utterance, on_end: Callable[[], None]) -> None: ...

    def stop(self) -> None: ...


class VoiceBridge:
    def __init__(
        self,
        engine: SpeechEngine,
        language: str = SPEECH_LANGUAGE,
        rate: float = SPEECH_RATE,
        pitch: float = SPEECH_PITCH,
    ):
        self.engine = engine
        self.language = language
        self.rate = rate
        self.pitch = pitch
        self.playback_state = PlaybackState.IDLE
        self.capture_state = CaptureState.IDLE
        self._utterance_id = 0

    def is_supported(self) -> bool:
        return self.engine.is_supported()

    # ─── Playback ────────────────────────────────────────────────────────────

    def speak(self, text: str) -> None:
        """
        Start reading text aloud, interrupting anything already playing.
        Raises NothingToReadError for blank text, NothingSpeakableError when
        cleaning leaves nothing to say, UnsupportedError if the engine cannot
        speak.
        """
        if not (text or "").strip():
            raise NothingToReadError("nothing to read")
        spoken = clean_for_speech(text)
        if not spoken:
            raise NothingSpeakableError("nothing speakable in text")

        if self.playback_state is PlaybackState.SPEAKING:
            logger.debug("Interrupting current utterance")
            self.engine.stop()
            self.playback_state = PlaybackState.IDLE

        self._utterance_id += 1
        utterance_id = self._utterance_id
        self.playback_state = PlaybackState.SPEAKING
        try:
            self.engine.speak(
                Utterance(spoken, self.language, self.rate, self.pitch),
                on_end=lambda: self._on_utterance_end(utterance_id),
            )
        except UnsupportedError:
            self.playback_state = PlaybackState.IDLE
            raise
        logger.info(f"Speaking {len(spoken)} chars (utterance {utterance_id})")

    def stop(self) -> None:
        """Force playback back to idle. Safe to call at any time."""
        self._utterance_id += 1  # late on_end callbacks become stale
        if self.playback_state is PlaybackState.SPEAKING:
            self.engine.stop()
            logger.info("Playback stopped")
        self.playback_state = PlaybackState.IDLE

    def _on_utterance_end(self, utterance_id: int) -> None:
        if utterance_id == self._utterance_id:
            self.playback_state = PlaybackState.IDLE

    # ─── Capture ─────────────────────────────────────────────────────────────

    async def listen(self) -> str:
        """
        Capture one spoken transcript.

        Fails fast with UnsupportedError when the host has no recognizer and
        with AlreadyListeningError while a capture is running. An engine error
        or a blank transcript raises CaptureError.
        """
        if not self.engine.is_supported():
            raise UnsupportedError("speech recognition is not available")
        if self.capture_state is CaptureState.LISTENING:
            raise AlreadyListeningError("already listening")

        loop = asyncio.get_running_loop()
        outcome: asyncio.Future = loop.create_future()

        def settle(transcript=None, reason=None):
            if outcome.done():
                logger.warning("Ignoring extra capture callback")
                return
            if reason is not None:
                outcome.set_exception(CaptureError(reason))
            elif not (transcript or "").strip():
                outcome.set_exception(CaptureError("no-speech"))
            else:
                outcome.set_result(transcript.strip())

        def on_result(transcript: str) -> None:
            loop.call_soon_threadsafe(settle, transcript, None)

        def on_error(reason: str) -> None:
            loop.call_soon_threadsafe(settle, None, reason or "unknown")

        self.capture_state = CaptureState.LISTENING
        logger.info(f"Listening ({self.language})")
        try:
            self.engine.start_capture(self.language, on_result, on_error)
            transcript = await outcome
            logger.info(f"Captured transcript: '{transcript[:50]}'")
            return transcript
        finally:
            self.capture_state = CaptureState.IDLE
