"""
Tutor Chat v1.0: Conversation Core

Composer, dispatcher, renderer and the controller that ties them together.
"""
from tutor_chat.tutor.composer import compose
from tutor_chat.tutor.controller import SessionController
from tutor_chat.tutor.dispatcher import AnswerResult, RequestDispatcher
from tutor_chat.tutor.renderer import ResponseRenderer, RevealTask
from tutor_chat.tutor.transcript import Transcript, TranscriptView

__all__ = [
    "AnswerResult", "RequestDispatcher", "ResponseRenderer", "RevealTask",
    "SessionController", "Transcript", "TranscriptView", "compose",
]
