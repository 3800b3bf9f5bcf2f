"""
Tests for the question composer: precedence and the never-empty guarantee.
"""

import pytest

from tutor_chat.state.session import Session, Turn
from tutor_chat.tutor.composer import (
    COURSE_PROMPT, FALLBACK_PROMPT, IMAGE_PROMPT, LESSON_PROMPT, compose,
)

IMAGE = "data:image/png;base64,iVBORw0KGgo="


class TestPrecedence:
    @pytest.mark.parametrize("image", [None, IMAGE])
    @pytest.mark.parametrize("course,lesson", [
        (None, None),
        ("Entrepreneurship", None),
        ("Entrepreneurship", "What is Entrepreneurship?"),
    ])
    def test_typed_text_always_wins(self, image, course, lesson):
        """Typed text is sent verbatim whatever else is present."""
        q = compose(Turn("  How do I price a product?", image), Session(course=course, lesson=lesson))
        assert q.text == "  How do I price a product?"

    def test_image_beats_course_context(self):
        """An attached image outranks the selected lesson."""
        q = compose(Turn("", IMAGE), Session(course="Marketing", lesson="Branding"))
        assert q.text == IMAGE_PROMPT
        assert q.image == IMAGE

    def test_lesson_prompt(self):
        """Course and lesson build the beginner-level lesson instruction."""
        q = compose(Turn(""), Session(course="Marketing", lesson="Branding"))
        assert q.text == LESSON_PROMPT.format(course="Marketing", lesson="Branding")
        assert "beginner" in q.text
        assert "exercises" in q.text

    def test_course_only_prompt(self):
        """A course without a lesson is taught from the basics."""
        q = compose(Turn(""), Session(course="Marketing"))
        assert q.text == COURSE_PROMPT.format(course="Marketing")
        assert "basics" in q.text

    def test_lesson_without_course_falls_back(self):
        """A lesson alone is not enough context."""
        q = compose(Turn(""), Session(lesson="Branding"))
        assert q.text == FALLBACK_PROMPT

    def test_whitespace_text_counts_as_empty(self):
        """Whitespace-only input does not block the fallbacks."""
        q = compose(Turn("   \n"), Session(course="Marketing"))
        assert q.text == COURSE_PROMPT.format(course="Marketing")


class TestFallback:
    def test_all_empty_returns_generic_prompt(self):
        """No input at all still yields a non-empty question."""
        q = compose(Turn("", None), Session())
        assert q.text == FALLBACK_PROMPT
        assert q.text.strip()
        assert q.image is None
        assert q.course is None and q.lesson is None

    def test_blank_context_values_are_absent(self):
        """Empty stored strings are treated as no selection."""
        q = compose(Turn(""), Session(course="", lesson=" "))
        assert q.text == FALLBACK_PROMPT
        assert q.course is None
        assert q.lesson is None


class TestContextFields:
    def test_context_rides_along_with_typed_text(self):
        """Course and lesson are sent even when the user typed a question."""
        q = compose(Turn("What is a startup?"), Session(course="Entrepreneurship", lesson="Intro"))
        assert q.course == "Entrepreneurship"
        assert q.lesson == "Intro"

    def test_scenario_lesson_selected_nothing_typed(self):
        """Selected lesson with no input asks for a beginner lesson naming both."""
        q = compose(
            Turn(""),
            Session(course="Entrepreneurship", lesson="What is Entrepreneurship?"),
        )
        assert "Entrepreneurship" in q.text
        assert "What is Entrepreneurship?" in q.text
        assert "beginner level" in q.text

    def test_compose_does_not_touch_session(self):
        """Composing is free of side effects."""
        session = Session(course="Marketing", pending_image=IMAGE)
        compose(Turn("hi", IMAGE), session)
        assert session.pending_image == IMAGE
        assert session.course == "Marketing"
        assert session.is_sending is False
