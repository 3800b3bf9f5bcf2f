"""
Tests for the request dispatcher against a mocked chat endpoint.
"""

import asyncio
import json

import httpx
import pytest

from tutor_chat.errors import BusyError, RejectedError, UnauthorizedError, UnreachableError
from tutor_chat.state.session import ComposedQuestion, Session
from tutor_chat.tutor.dispatcher import GENERIC_REJECTION, RequestDispatcher

from fakes import settle


def make_dispatcher(handler):
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        base_url="http://tutor.test/api",
    )
    return RequestDispatcher(client=client)


QUESTION = ComposedQuestion(text="What is profit?", course="Entrepreneurship")


@pytest.fixture
def session():
    return Session(auth_token="tok-123")


class TestSuccess:
    async def test_request_shape(self, session):
        """POSTs the question as JSON with a bearer token."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"answer": "Revenue minus cost."})

        result = await make_dispatcher(handler).send(QUESTION, session)

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "http://tutor.test/api/chat"
        assert request.headers["Authorization"] == "Bearer tok-123"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {
            "question": "What is profit?",
            "image": None,
            "course": "Entrepreneurship",
            "lesson": None,
        }
        assert result.answer == "Revenue minus cost."
        assert result.images == []

    async def test_images_keep_order(self, session):
        """Returned images come back in server order."""
        def handler(request):
            return httpx.Response(200, json={"answer": "See charts", "images": ["b.png", "a.png"]})

        result = await make_dispatcher(handler).send(QUESTION, session)
        assert result.images == ["b.png", "a.png"]

    async def test_missing_answer_is_empty(self, session):
        """A body without an answer yields empty text for the caller to replace."""
        def handler(request):
            return httpx.Response(200, json={"images": None})

        result = await make_dispatcher(handler).send(QUESTION, session)
        assert result.answer == ""
        assert result.images == []


class TestFailures:
    async def test_401_is_unauthorized(self, session):
        def handler(request):
            return httpx.Response(401, json={"message": "jwt expired"})

        with pytest.raises(UnauthorizedError):
            await make_dispatcher(handler).send(QUESTION, session)

    async def test_server_message_is_kept(self, session):
        """Non-2xx with a message surfaces that message."""
        def handler(request):
            return httpx.Response(404, json={"message": "Lesson not found"})

        with pytest.raises(RejectedError) as exc:
            await make_dispatcher(handler).send(QUESTION, session)
        assert exc.value.message == "Lesson not found"
        assert exc.value.status_code == 404

    @pytest.mark.parametrize("response", [
        httpx.Response(500),
        httpx.Response(502, text="<html>Bad gateway</html>"),
        httpx.Response(400, json={"message": ""}),
        httpx.Response(400, json=["not", "an", "object"]),
    ])
    async def test_generic_rejection(self, session, response):
        """Without a usable message the generic text is used."""
        with pytest.raises(RejectedError) as exc:
            await make_dispatcher(lambda request: response).send(QUESTION, session)
        assert exc.value.message == GENERIC_REJECTION

    async def test_unparseable_success_body(self, session):
        def handler(request):
            return httpx.Response(200, text="not json")

        with pytest.raises(RejectedError) as exc:
            await make_dispatcher(handler).send(QUESTION, session)
        assert exc.value.message == GENERIC_REJECTION

    async def test_corrupt_encoding_is_rejected(self, session):
        """A body that cannot be decoded maps to the generic rejection."""
        def handler(request):
            return httpx.Response(
                200, headers={"Content-Encoding": "gzip"}, content=b"not gzip at all",
            )

        dispatcher = make_dispatcher(handler)
        with pytest.raises(RejectedError) as exc:
            await dispatcher.send(QUESTION, session)
        assert exc.value.message == GENERIC_REJECTION
        assert dispatcher.in_flight is False

    @pytest.mark.parametrize("error", [httpx.ConnectError, httpx.ReadTimeout, httpx.TooManyRedirects])
    async def test_no_response_is_unreachable(self, session, error):
        def handler(request):
            raise error("boom", request=request)

        with pytest.raises(UnreachableError):
            await make_dispatcher(handler).send(QUESTION, session)

    async def test_no_token_sends_nothing(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"answer": "x"})

        with pytest.raises(UnauthorizedError):
            await make_dispatcher(handler).send(QUESTION, Session())
        assert calls == []


class TestSingleFlight:
    async def test_second_send_is_busy(self, session):
        """A second call while one is outstanding fails without a request."""
        gate = asyncio.Event()
        calls = []

        async def handler(request):
            calls.append(request)
            await gate.wait()
            return httpx.Response(200, json={"answer": "done"})

        dispatcher = make_dispatcher(handler)
        first = asyncio.create_task(dispatcher.send(QUESTION, session))
        await settle(lambda: calls)

        with pytest.raises(BusyError):
            await dispatcher.send(QUESTION, session)
        assert len(calls) == 1

        gate.set()
        assert (await first).answer == "done"
        assert dispatcher.in_flight is False

    async def test_flag_released_after_failure(self, session):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        dispatcher = make_dispatcher(handler)
        with pytest.raises(UnreachableError):
            await dispatcher.send(QUESTION, session)
        assert dispatcher.in_flight is False
