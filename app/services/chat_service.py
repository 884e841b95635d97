"""
Chat session operations — every call is scoped to an explicit caller id.

- Sessions are owned by exactly one user; every read/write checks existence first (404) then owner (403)
- sendMessage calls upstream with no transaction open, then stores the user turn and the reply together in one short transaction
- deleteChat removes messages then the session, also in one transaction
"""
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import ChatError, ErrorKind
from app.core.upstream import RedactionClient, UpstreamConfig, get_upstream_config
from app.models.chat_message import ChatMessage, SENDER_ASSISTANT, SENDER_USER
from app.models.chat_session import ChatSession

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def default_title(now: datetime) -> str:
    return f"Chat {now:%Y-%m-%d %H:%M:%S}"


def role_for(sender: str | None) -> str:
    return "assistant" if (sender or "").strip().lower() == SENDER_ASSISTANT else "user"


def render_transcript(messages: list[ChatMessage]) -> str:
    """Chronological 'User: ...' / 'Assistant: ...' blocks separated by blank lines."""
    blocks = []
    for m in messages:
        label = "Assistant" if role_for(m.sender) == "assistant" else "User"
        blocks.append(f"{label}: {m.content}")
    return "\n\n".join(blocks).rstrip()


class ChatService:
    def __init__(self, db: Session, client: RedactionClient, config: UpstreamConfig | None = None):
        self.db = db
        self.client = client
        self._config = config

    @property
    def config(self) -> UpstreamConfig:
        # Read from the settings store only when a message is actually sent.
        if self._config is None:
            self._config = get_upstream_config(self.db)
        return self._config

    def list_sessions(self, caller_id: int) -> list[dict]:
        sessions = (
            self.db.query(ChatSession)
            .filter(ChatSession.user_id == caller_id)
            .order_by(ChatSession.updated_at.desc(), ChatSession.id.desc())
            .all()
        )
        return [
            {"chat_id": s.id, "title": s.title, "updated_at": _iso(s.updated_at)}
            for s in sessions
        ]

    def create_session(self, caller_id: int) -> dict:
        now = _now()
        session = ChatSession(user_id=caller_id, title=default_title(now), created_at=now, updated_at=now)
        try:
            self.db.add(session)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to create chat session for user %s", caller_id)
            raise ChatError(ErrorKind.PERSISTENCE, "Failed to create chat session")
        self.db.refresh(session)
        if not session.id:
            raise ChatError(ErrorKind.PERSISTENCE, "Store did not return an id for the new chat session")
        return {"chat_id": session.id, "title": session.title, "user_id": session.user_id}

    def list_messages(self, caller_id: int, session_id: int) -> list[dict]:
        self._owned_session(caller_id, session_id)
        return [{"role": role_for(m.sender), "content": m.content} for m in self._history(session_id)]

    def send_message(self, caller_id: int, session_id: int, content: str) -> dict:
        if not isinstance(content, str) or not content.strip():
            raise ChatError(ErrorKind.BAD_REQUEST, "Message content cannot be empty.")
        self._owned_session(caller_id, session_id)

        user_message = ChatMessage(
            session_id=session_id,
            user_id=caller_id,
            sender=SENDER_USER,
            content=content,
            timestamp=_now(),
        )
        try:
            transcript = render_transcript(self._history(session_id) + [user_message])
            config = self.config
            # No transaction may stay open across the upstream call.
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to read history for chat %s", session_id)
            raise ChatError(ErrorKind.PERSISTENCE, "Failed to read chat history")

        if not config.api_key:
            raise ChatError(ErrorKind.CONFIGURATION, "Upstream API key is not configured")
        reply = self.client.reply(config, transcript)

        try:
            session = self.db.query(ChatSession).filter(ChatSession.id == session_id).first()
            if not session:
                raise ChatError(ErrorKind.NOT_FOUND, "Chat session not found.")
            now = _now()
            self.db.add(user_message)
            self.db.add(ChatMessage(
                session_id=session_id,
                user_id=caller_id,
                sender=SENDER_ASSISTANT,
                content=reply,
                timestamp=now,
            ))
            session.updated_at = now
            self.db.commit()
        except ChatError:
            self.db.rollback()
            raise
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to store messages for chat %s", session_id)
            raise ChatError(ErrorKind.PERSISTENCE, "Failed to store chat messages")

        return {"role": "assistant", "content": reply}

    def delete_session(self, caller_id: int, session_id: int) -> bool:
        session = self._owned_session(caller_id, session_id)

        step = "messages"
        try:
            self.db.query(ChatMessage).filter(ChatMessage.session_id == session.id).delete(
                synchronize_session=False
            )
            step = "session"
            self.db.delete(session)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to delete chat %s (step: %s); rolled back", session_id, step)
            raise ChatError(ErrorKind.PERSISTENCE, "Failed to delete chat session")
        return True

    def _owned_session(self, caller_id: int, session_id: int) -> ChatSession:
        session = self.db.query(ChatSession).filter(ChatSession.id == session_id).first()
        if not session:
            raise ChatError(ErrorKind.NOT_FOUND, "Chat session not found.")
        if session.user_id != caller_id:
            logger.warning("User %s denied access to chat %s", caller_id, session_id)
            raise ChatError(ErrorKind.FORBIDDEN, "You do not have access to this chat session.")
        return session

    def _history(self, session_id: int) -> list[ChatMessage]:
        return (
            self.db.query(ChatMessage)
            .filter(ChatMessage.session_id == session_id)
            .order_by(ChatMessage.timestamp.asc(), ChatMessage.id.asc())
            .all()
        )
