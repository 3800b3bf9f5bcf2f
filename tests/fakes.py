"""Fakes and helpers shared by the chat client tests."""

import asyncio

from tutor_chat.errors import UnsupportedError
from tutor_chat.tutor.dispatcher import AnswerResult


class FakeSpeechEngine:
    """Records utterances and hands capture callbacks back to the test."""

    def __init__(self, supported=True, can_speak=True):
        self.supported = supported
        self.can_speak = can_speak
        self.spoken = []
        self.end_callbacks = []
        self.captures = []
        self.stops = 0

    def is_supported(self):
        return self.supported

    def start_capture(self, language, on_result, on_error):
        self.captures.append((on_result, on_error))

    def speak(self, utterance, on_end):
        if not self.can_speak:
            raise UnsupportedError("no synthesis")
        self.spoken.append(utterance)
        self.end_callbacks.append(on_end)

    def stop(self):
        self.stops += 1


class FakeDispatcher:
    """Stands in for RequestDispatcher. Optionally blocks until gate is set."""

    def __init__(self, outcomes=None):
        self.outcomes = list(outcomes or [AnswerResult("Here is your answer.")])
        self.calls = []
        self.gate = None
        self.active = 0
        self.max_active = 0

    async def send(self, composed, session):
        self.calls.append(composed)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.gate is not None:
                await self.gate.wait()
            outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        finally:
            self.active -= 1


class StepClock:
    """Replacement for asyncio.sleep that records every reveal step."""

    def __init__(self, block_after=None):
        self.delays = []
        self.block_after = block_after
        self.release = asyncio.Event()

    async def __call__(self, delay):
        self.delays.append(delay)
        if self.block_after is not None and len(self.delays) >= self.block_after:
            await self.release.wait()
        else:
            await asyncio.sleep(0)


async def settle(predicate, rounds=200):
    """Let the loop run until predicate() holds."""
    for _ in range(rounds):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")
