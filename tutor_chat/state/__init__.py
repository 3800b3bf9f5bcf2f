from tutor_chat.state.session import ComposedQuestion, RenderedMessage, Role, Session, Turn

__all__ = ["ComposedQuestion", "RenderedMessage", "Role", "Session", "Turn"]
