from tutor_chat.voice.bridge import CaptureState, PlaybackState, SpeechEngine, Utterance, VoiceBridge
from tutor_chat.voice.engines import ConsoleSpeechEngine, NullSpeechEngine

__all__ = [
    "CaptureState", "ConsoleSpeechEngine", "NullSpeechEngine", "PlaybackState",
    "SpeechEngine", "Utterance", "VoiceBridge",
]
