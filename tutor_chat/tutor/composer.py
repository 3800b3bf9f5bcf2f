"""
Tutor Chat v1.0: Question Composer
Derives the question actually sent to the tutor backend.

This is a PURE FUNCTION. It never fails and never returns empty text.

Precedence (first match wins):
1. Typed text          → sent verbatim
2. Attached image      → explain the image
3. Course + lesson     → teach the lesson from beginner level
4. Course only         → teach the course from the basics
5. Nothing             → generic fallback
Stored course/lesson context never overrides typed text or an image.
"""

from tutor_chat.state.session import ComposedQuestion, Session, Turn

# ─── Canned prompts ──────────────────────────────────────────────────────────

IMAGE_PROMPT = (
    "Explain the uploaded image step by step. Describe what it shows, "
    "then teach the key idea behind it in simple terms."
)

LESSON_PROMPT = (
    'Teach me the lesson "{lesson}" from the course "{course}". '
    "Start from beginner level, explain each idea with practical examples, "
    "and end with a few exercises I can practice."
)

COURSE_PROMPT = (
    'Teach me "{course}" from the basics. '
    "Assume I am a beginner and use simple examples."
)

FALLBACK_PROMPT = "Teach me something valuable I can learn today, with a simple example."


def _present(value) -> bool:
    return bool(value and str(value).strip())


def compose(turn: Turn, session: Session) -> ComposedQuestion:
    """Build the ComposedQuestion for a turn. Context fields always ride along."""
    course = session.course if _present(session.course) else None
    lesson = session.lesson if _present(session.lesson) else None
    image = turn.attached_image or None

    if _present(turn.user_text):
        text = turn.user_text
    elif image:
        text = IMAGE_PROMPT
    elif course and lesson:
        text = LESSON_PROMPT.format(course=course, lesson=lesson)
    elif course:
        text = COURSE_PROMPT.format(course=course)
    else:
        text = FALLBACK_PROMPT

    return ComposedQuestion(text=text, image=image, course=course, lesson=lesson)
