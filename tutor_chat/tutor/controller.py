"""
Tutor Chat v1.0: Session Controller
Owns the Session and orchestrates one turn at a time:

submit_turn → echo user message → thinking on → compose → dispatch
            → thinking off → render reply (or a fixed failure message)

Ordering rules:
- is_sending serializes dispatches. A second turn while one is in flight is
  dropped before any network call.
- Reveals never overlap. A reply waits for the previous reveal to settle.
- clear() cancels playback and the running reveal but not the in-flight
  request. A reply that lands after a clear is discarded unrendered.
"""

import asyncio
import logging
from typing import Callable, Optional

from tutor_chat.config import ASSISTANT_NAME
from tutor_chat.errors import (
    AlreadyListeningError, BusyError, CaptureError, EmptyInputError,
    NothingSpeakableError, NothingToReadError, RejectedError, TutorChatError, UnauthorizedError,
    UnreachableError, UnsupportedError,
)
from tutor_chat.media import image_to_data_url
from tutor_chat.state.session import ComposedQuestion, RenderedMessage, Role, Session, Turn
from tutor_chat.storage.persistence import (
    ACTIVE_COURSE_KEY, ACTIVE_LESSON_KEY, TOKEN_KEY, WELCOMED_KEY, PersistenceAdapter,
)
from tutor_chat.tutor.composer import compose
from tutor_chat.tutor.dispatcher import RequestDispatcher
from tutor_chat.tutor.renderer import ResponseRenderer
from tutor_chat.tutor.transcript import TranscriptView
from tutor_chat.voice.bridge import VoiceBridge

logger = logging.getLogger(__name__)

# ─── Transcript text ─────────────────────────────────────────────────────────

GREETING_TEXT = f"Hello 👋 I'm {ASSISTANT_NAME}.\nSelect a course and lesson to begin."
WELCOME_TEXT = (
    f"Welcome to {ASSISTANT_NAME}! Ask a question, upload an image or use your voice. "
    "With a lesson selected you can also just press send and I will teach it."
)
THINKING_TEXT = f"{ASSISTANT_NAME} is thinking..."
IMAGE_PLACEHOLDER = "📷 Image uploaded"
CONTEXT_PLACEHOLDER = "📘 Teach me this lesson"
LESSON_SELECTED_TEXT = "📘 Lesson selected.\nAsk questions about this lesson."
NO_RESPONSE_TEXT = "No response generated."

# One fixed message per failure kind. Raw error details only go to the log.
FAILURE_MESSAGES = {
    UnauthorizedError: "🔒 Your session has expired. Please log in again.",
    UnreachableError: f"❌ Unable to connect to {ASSISTANT_NAME}.",
}

# ─── Alerts ──────────────────────────────────────────────────────────────────

EMPTY_INPUT_ALERT = "Type a question, upload an image or select a lesson first."
NOTHING_TO_READ_ALERT = "No AI answer to read yet."
NOTHING_SPEAKABLE_ALERT = "This answer has nothing that can be read aloud."
VOICE_INPUT_UNSUPPORTED_ALERT = "Voice input not supported."
VOICE_OUTPUT_UNSUPPORTED_ALERT = "Voice output not supported."
ALREADY_LISTENING_ALERT = "Already listening..."
CAPTURE_FAILED_ALERT = "Sorry, I didn't catch that. Please try again."


class SessionController:
    def __init__(
        self,
        store: PersistenceAdapter,
        view: TranscriptView,
        dispatcher: RequestDispatcher,
        voice: VoiceBridge,
        renderer: Optional[ResponseRenderer] = None,
        on_navigate: Optional[Callable[[str], None]] = None,
    ):
        self.store = store
        self.view = view
        self.dispatcher = dispatcher
        self.voice = voice
        self.renderer = renderer or ResponseRenderer(view)
        self.on_navigate = on_navigate
        self.session = Session()
        self._epoch = 0  # bumped by clear() and logout(); stale replies compare against it
        self._pending: Optional[asyncio.Task] = None

    # ─── Lifecycle ───────────────────────────────────────────────────────────

    def start(self) -> bool:
        """Load the stored session. Without a token, send the user to login."""
        token = self.store.get(TOKEN_KEY)
        if not token:
            logger.info("No session token, redirecting to login")
            self._navigate("login")
            return False

        self.session.auth_token = token
        self._refresh_context()
        self.view.reset(RenderedMessage(Role.ASSISTANT, GREETING_TEXT))
        if not self.store.get(WELCOMED_KEY):
            self.view.append(RenderedMessage(Role.ASSISTANT, WELCOME_TEXT))
            self.store.set(WELCOMED_KEY, "true")
        logger.info(f"Session started: {self.session.to_dict()}")
        return True

    def clear(self) -> None:
        """Stop playback, cancel the reveal and reset the transcript to the greeting."""
        self.voice.stop()
        active = self.renderer.active
        if active is not None:
            active.cancel()
        self._epoch += 1
        self.session.last_rendered_answer = None
        self.session.pending_image = None
        self.view.reset(RenderedMessage(Role.ASSISTANT, GREETING_TEXT))
        logger.info("Chat cleared")

    def logout(self) -> None:
        """Forget every stored key and hand control to the login flow."""
        self.voice.stop()
        self._epoch += 1
        self.store.clear()
        self.session.reset()
        logger.info("Logged out")
        self._navigate("login")

    def _navigate(self, target: str) -> None:
        if self.on_navigate is not None:
            self.on_navigate(target)

    # ─── Context and attachments ─────────────────────────────────────────────

    def _refresh_context(self) -> None:
        self.session.course = self.store.get(ACTIVE_COURSE_KEY) or None
        self.session.lesson = self.store.get(ACTIVE_LESSON_KEY) or None

    def select_course(self, course: str) -> None:
        self.store.set(ACTIVE_COURSE_KEY, course)
        self.store.remove(ACTIVE_LESSON_KEY)
        self._refresh_context()

    def select_lesson(self, course: str, lesson: str) -> None:
        self.store.set(ACTIVE_COURSE_KEY, course)
        self.store.set(ACTIVE_LESSON_KEY, lesson)
        self._refresh_context()
        self.view.append(RenderedMessage(Role.ASSISTANT, LESSON_SELECTED_TEXT))

    def attach_image(self, data_url: str) -> None:
        """Hold an image until the next turn is submitted."""
        self.session.pending_image = data_url
        logger.info(f"Image attached ({len(data_url)} chars)")

    def attach_image_file(self, path) -> None:
        self.attach_image(image_to_data_url(path))

    # ─── Turns ───────────────────────────────────────────────────────────────

    def submit_text(self, text: str) -> Optional[asyncio.Task]:
        """Submit typed (or transcribed) text with any pending image."""
        return self.submit_turn(Turn((text or "").strip(), self.session.pending_image))

    def submit_turn(self, turn: Turn) -> Optional[asyncio.Task]:
        """
        Start a turn. Returns the background task handling it, or None if the
        turn was refused (request already in flight, or nothing to submit).
        Must be called from a running event loop.
        """
        if self.session.is_sending:
            logger.warning("Turn dropped: a request is already in flight")
            return None

        self._refresh_context()
        try:
            self._check_submittable(turn)
        except EmptyInputError:
            self.view.alert(EMPTY_INPUT_ALERT)
            return None

        image = turn.attached_image
        echo = (turn.user_text or "").strip() or (IMAGE_PLACEHOLDER if image else CONTEXT_PLACEHOLDER)
        self.view.append(RenderedMessage(Role.USER, echo, [image] if image else []))

        self.session.is_sending = True
        self.view.show_thinking(THINKING_TEXT)

        composed = compose(turn, self.session)
        self._pending = asyncio.get_running_loop().create_task(
            self._dispatch(composed, self._epoch),
        )
        return self._pending

    def _check_submittable(self, turn: Turn) -> None:
        if turn.is_empty and not self.session.has_context:
            raise EmptyInputError("nothing to submit")

    async def _dispatch(self, composed: ComposedQuestion, epoch: int) -> None:
        result = None
        failure: Optional[TutorChatError] = None
        try:
            result = await self.dispatcher.send(composed, self.session)
        except BusyError:
            logger.warning("Dispatcher busy, turn dropped")
            return
        except TutorChatError as e:
            failure = e
        finally:
            self.view.remove_thinking()
            self.session.is_sending = False

        if isinstance(failure, UnauthorizedError):
            stale = epoch != self._epoch
            self.logout()
            if not stale:
                # The session is already reset; the notice is shown but not kept.
                await self._render(FAILURE_MESSAGES[UnauthorizedError], [], self._epoch, remember=False)
            return

        if epoch != self._epoch:
            logger.info("Reply discarded: chat was cleared while waiting")
            return

        if failure is not None:
            logger.warning(f"Turn failed: {type(failure).__name__}: {failure}")
            await self._render(self._failure_message(failure), [], epoch)
            return

        if self.session.pending_image is not None and self.session.pending_image == composed.image:
            self.session.pending_image = None
        await self._render(result.answer.strip() or NO_RESPONSE_TEXT, result.images, epoch)

    @staticmethod
    def _failure_message(failure: TutorChatError) -> str:
        if isinstance(failure, RejectedError):
            return f"⚠️ {failure.message}"
        for kind, message in FAILURE_MESSAGES.items():
            if isinstance(failure, kind):
                return message
        return FAILURE_MESSAGES[UnreachableError]

    async def _render(self, text: str, images: list, epoch: int, remember: bool = True) -> None:
        prior = self.renderer.active
        while prior is not None:
            await prior.wait()
            prior = self.renderer.active
        if epoch != self._epoch:
            return

        message = await self.renderer.render(text, images).wait()
        if message is None or epoch != self._epoch or not remember:
            return
        self.session.last_rendered_answer = message.displayed_text
        logger.info(f"Answer rendered: {len(message.displayed_text)} chars, {len(message.images)} images")

    async def wait_idle(self) -> None:
        """Wait until the current turn (dispatch and reveal) has settled."""
        if self._pending is not None:
            await asyncio.wait({self._pending})

    # ─── Voice ───────────────────────────────────────────────────────────────

    def read_last_answer(self) -> bool:
        try:
            self.voice.speak(self.session.last_rendered_answer or "")
        except NothingSpeakableError:
            self.view.alert(NOTHING_SPEAKABLE_ALERT)
            return False
        except NothingToReadError:
            self.view.alert(NOTHING_TO_READ_ALERT)
            return False
        except UnsupportedError:
            self.view.alert(VOICE_OUTPUT_UNSUPPORTED_ALERT)
            return False
        return True

    def stop_speaking(self) -> None:
        self.voice.stop()

    async def listen(self) -> Optional[asyncio.Task]:
        """Capture one spoken question and submit it as if it were typed."""
        try:
            transcript = await self.voice.listen()
        except UnsupportedError:
            self.view.alert(VOICE_INPUT_UNSUPPORTED_ALERT)
            return None
        except AlreadyListeningError:
            self.view.alert(ALREADY_LISTENING_ALERT)
            return None
        except CaptureError as e:
            logger.warning(f"Speech capture failed: {e.reason}")
            self.view.alert(CAPTURE_FAILED_ALERT)
            return None
        return self.submit_text(transcript)
