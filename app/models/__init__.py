from app.models.chat_session import ChatSession
from app.models.chat_message import ChatMessage
from app.models.upstream_settings import UpstreamSettings

__all__ = ["ChatSession", "ChatMessage", "UpstreamSettings"]
