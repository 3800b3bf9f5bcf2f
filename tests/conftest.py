"""Fixtures shared by the chat client tests."""

import pytest

from tutor_chat.storage.persistence import MemoryStore
from tutor_chat.tutor.controller import SessionController
from tutor_chat.tutor.renderer import ResponseRenderer
from tutor_chat.tutor.transcript import Transcript
from tutor_chat.voice.bridge import VoiceBridge

from fakes import FakeDispatcher, FakeSpeechEngine, StepClock


@pytest.fixture
def engine():
    return FakeSpeechEngine()


@pytest.fixture
def store():
    return MemoryStore({"token": "tok-123"})


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def make_controller(store, engine, clock):
    """Build a started controller around the fakes."""

    def _make(dispatcher=None, renderer_clock=None, navigation=None):
        view = Transcript()
        renderer = ResponseRenderer(view, step_delay=0.012, sleep=renderer_clock or clock)
        controller = SessionController(
            store=store,
            view=view,
            dispatcher=dispatcher or FakeDispatcher(),
            voice=VoiceBridge(engine),
            renderer=renderer,
            on_navigate=(navigation.append if navigation is not None else None),
        )
        controller.start()
        return controller

    return _make
