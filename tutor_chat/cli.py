"""
Tutor Chat v1.0: Terminal Client
Runs the session controller against stdin/stdout. Login stays external: the
token comes from the store or from TUTOR_TOKEN.
"""

import asyncio
import logging
import sys

from tutor_chat.config import ASSISTANT_NAME, LOG_LEVEL, STORE_PATH, TOKEN
from tutor_chat.state.session import RenderedMessage, Role
from tutor_chat.storage.persistence import TOKEN_KEY, JsonFileStore
from tutor_chat.tutor.controller import SessionController
from tutor_chat.tutor.dispatcher import RequestDispatcher
from tutor_chat.tutor.transcript import Transcript
from tutor_chat.voice.bridge import VoiceBridge
from tutor_chat.voice.engines import ConsoleSpeechEngine

logger = logging.getLogger(__name__)

HELP_TEXT = """Commands:
  /image PATH               - Attach an image to your next question
  /course NAME              - Select a course
  /lesson COURSE | LESSON   - Select a course and lesson
  /listen                   - Ask by voice
  /read                     - Read the last answer aloud
  /stop                     - Stop reading
  /clear                    - Clear the chat
  /logout                   - Log out
  /quit                     - Exit
Anything else is sent as a question. Press ENTER on an empty line to
continue the selected lesson."""


class TerminalTranscript(Transcript):
    """Mirrors the transcript onto the terminal, streaming reveals in place."""

    def __init__(self, out=None):
        super().__init__()
        self.out = out
        self._streaming = None  # index of the message being revealed
        self._printed = 0

    def _write(self, text: str) -> None:
        out = self.out or sys.stdout
        out.write(text)
        out.flush()

    def _end_stream(self) -> None:
        if self._streaming is not None:
            self._write("\n")
            self._streaming = None

    def _print_message(self, message: RenderedMessage) -> None:
        speaker = "You" if message.role is Role.USER else ASSISTANT_NAME
        self._write(f"{speaker}: {message.displayed_text}\n")
        for _ in message.images:
            self._write("   [image]\n")

    def append(self, message: RenderedMessage) -> int:
        index = super().append(message)
        self._end_stream()
        if message.role is Role.ASSISTANT and not message.displayed_text:
            self._write(f"{ASSISTANT_NAME}: ")
            self._streaming = index
            self._printed = 0
        else:
            self._print_message(message)
        return index

    def update_text(self, index: int, text: str) -> None:
        super().update_text(index, text)
        if index == self._streaming:
            self._write(text[self._printed:])
            self._printed = len(text)

    def add_images(self, index: int, images: list) -> None:
        super().add_images(index, images)
        if index == self._streaming:
            self._write(f"\n   [{len(images)} image(s) attached]")

    def mark_playable(self, index: int) -> None:
        super().mark_playable(index)
        if index == self._streaming:
            self._write("\n   (🔊 /read to listen)")
            self._end_stream()

    def show_thinking(self, text: str) -> None:
        super().show_thinking(text)
        self._write(f"   {text}\n")

    def reset(self, greeting: RenderedMessage) -> None:
        super().reset(greeting)
        self._end_stream()
        self._write("\n" + "-" * 55 + "\n")
        self._print_message(greeting)

    def alert(self, text: str) -> None:
        super().alert(text)
        self._end_stream()
        self._write(f"⚠️  {text}\n")


async def handle_command(controller: SessionController, line: str) -> bool:
    """Run one input line. Returns False when the client should exit."""
    command, _, arg = line.partition(" ")
    arg = arg.strip()

    if command == "/quit":
        return False
    if command == "/help":
        print(HELP_TEXT)
    elif command == "/image":
        try:
            controller.attach_image_file(arg)
            print(f"📷 {arg} attached to your next question.")
        except (OSError, ValueError) as e:
            logger.warning(f"Image attach failed: {e}")
            controller.view.alert(f"Could not attach image: {e}")
    elif command == "/course":
        controller.select_course(arg)
        print(f"Course selected: {arg}")
    elif command == "/lesson":
        course, sep, lesson = arg.partition("|")
        if not sep or not course.strip() or not lesson.strip():
            controller.view.alert("Usage: /lesson COURSE | LESSON")
        else:
            controller.select_lesson(course.strip(), lesson.strip())
    elif command == "/listen":
        await controller.listen()
    elif command == "/read":
        controller.read_last_answer()
    elif command == "/stop":
        controller.stop_speaking()
    elif command == "/clear":
        controller.clear()
    elif command == "/logout":
        controller.logout()
    else:
        controller.submit_text(line)
    await controller.wait_idle()
    return True


async def run() -> None:
    store = JsonFileStore(STORE_PATH)
    if TOKEN and not store.get(TOKEN_KEY):
        store.set(TOKEN_KEY, TOKEN)

    navigation = []
    async with RequestDispatcher() as dispatcher:
        controller = SessionController(
            store=store,
            view=TerminalTranscript(),
            dispatcher=dispatcher,
            voice=VoiceBridge(ConsoleSpeechEngine()),
            on_navigate=navigation.append,
        )
        if not controller.start():
            print("Not logged in. Log in on the web app or set TUTOR_TOKEN.")
            return
        print(HELP_TEXT)

        while not navigation:
            try:
                line = await asyncio.to_thread(input, "> ")
            except EOFError:
                break
            if not await handle_command(controller, line.strip()):
                break

    if navigation:
        print(f"Session ended ({navigation[-1]}).")


def main() -> None:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        print()
