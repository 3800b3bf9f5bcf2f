"""
Tutor Chat v1.0: Speech Engines
Concrete SpeechEngine implementations for hosts without a browser.
"""

import logging
from typing import Callable, Optional, TextIO

from tutor_chat.errors import UnsupportedError
from tutor_chat.voice.bridge import Utterance

logger = logging.getLogger(__name__)


# ─── No speech at all ────────────────────────────────────────────────────────

class NullSpeechEngine:
    """Host with no speech capability. Everything degrades to UnsupportedError."""

    def is_supported(self) -> bool:
        return False

    def start_capture(self, language, on_result, on_error) -> None:
        raise UnsupportedError("speech recognition is not available")

    def speak(self, utterance: Utterance, on_end: Callable[[], None]) -> None:
        raise UnsupportedError("speech synthesis is not available")

    def stop(self) -> None:
        pass


# ─── Console ─────────────────────────────────────────────────────────────────

class ConsoleSpeechEngine(NullSpeechEngine):
    """
    Terminal stand-in for speech synthesis: the utterance is printed instead
    of played, and finishes immediately. No recognizer.
    """

    def __init__(self, out: Optional[TextIO] = None):
        self.out = out

    def speak(self, utterance: Utterance, on_end: Callable[[], None]) -> None:
        logger.info(f"TTS [console]: '{utterance.text[:50]}...'")
        print(f"🔊 {utterance.text}", file=self.out, flush=True)  # None means current stdout
        on_end()
