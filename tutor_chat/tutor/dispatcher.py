"""
Tutor Chat v1.0: Request Dispatcher
Single-flight POST to the tutor chat endpoint. Translates HTTP and network
outcomes into the client error taxonomy. No retries: the user re-submits.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

import httpx
from pydantic import BaseModel

from tutor_chat.config import API_BASE, CHAT_ENDPOINT, REQUEST_TIMEOUT_SECONDS
from tutor_chat.errors import BusyError, RejectedError, UnauthorizedError, UnreachableError
from tutor_chat.state.session import ComposedQuestion, Session

logger = logging.getLogger(__name__)

GENERIC_REJECTION = "The tutor could not answer this request. Please try again."


# ─── Wire models ─────────────────────────────────────────────────────────────

class ChatRequest(BaseModel):
    question: Optional[str] = None
    image: Optional[str] = None
    course: Optional[str] = None
    lesson: Optional[str] = None


class ChatResponse(BaseModel):
    answer: Optional[str] = None
    images: Optional[list[str]] = None


class ErrorBody(BaseModel):
    message: Optional[str] = None


@dataclass
class AnswerResult:
    answer: str
    images: list = field(default_factory=list)


# ─── Dispatcher ──────────────────────────────────────────────────────────────

class RequestDispatcher:
    def __init__(
        self,
        base_url: str = API_BASE,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "RequestDispatcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def send(self, composed: ComposedQuestion, session: Session) -> AnswerResult:
        """
        Ask the backend one question.

        Raises BusyError (another call in flight, nothing sent),
        UnauthorizedError (401 or no token), RejectedError (other non-2xx or
        an unusable body) and UnreachableError (no response at all).
        """
        if self._in_flight:
            raise BusyError("a chat request is already in flight")
        if not session.auth_token:
            raise UnauthorizedError("no session token")

        self._in_flight = True
        start = time.perf_counter()
        try:
            payload = ChatRequest(
                question=composed.text or None,
                image=composed.image,
                course=composed.course,
                lesson=composed.lesson,
            )
            headers = {"Authorization": f"Bearer {session.auth_token}"}
            try:
                response = await self._client.post(
                    CHAT_ENDPOINT, json=payload.model_dump(), headers=headers,
                )
            except httpx.DecodingError as e:
                logger.error(f"Chat response could not be decoded: {e!r}")
                raise RejectedError(GENERIC_REJECTION) from e
            except httpx.RequestError as e:
                elapsed = int((time.perf_counter() - start) * 1000)
                logger.error(f"Chat request failed after {elapsed}ms: {e!r}")
                raise UnreachableError(str(e)) from e

            elapsed = int((time.perf_counter() - start) * 1000)
            logger.info(f"Chat response: HTTP {response.status_code} in {elapsed}ms")
            return self._parse(response)
        finally:
            self._in_flight = False

    def _parse(self, response: httpx.Response) -> AnswerResult:
        if response.status_code == 401:
            logger.warning("Chat request unauthorized, session token rejected")
            raise UnauthorizedError("session token rejected")

        if not response.is_success:
            message = self._error_message(response)
            logger.warning(f"Chat request rejected: HTTP {response.status_code}: {response.text[:200]}")
            raise RejectedError(message, response.status_code)

        try:
            body = ChatResponse.model_validate(response.json())
        except ValueError as e:
            logger.error(f"Unusable chat response body: {e}")
            raise RejectedError(GENERIC_REJECTION, response.status_code) from e

        return AnswerResult(answer=body.answer or "", images=list(body.images or []))

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = ErrorBody.model_validate(response.json())
        except ValueError:
            return GENERIC_REJECTION
        message = (body.message or "").strip()
        return message or GENERIC_REJECTION
