import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.core.security import decode_token
from app.core.upstream import RedactionClient
from app.services.chat_service import ChatService

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_caller_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> int | None:
    """Caller's user id from the host-issued token; None when unauthenticated.

    The chat endpoint reports 401 itself so the response keeps the JSON envelope.
    """
    if not credentials:
        return None
    payload = decode_token(credentials.credentials)
    if not payload:
        return None
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        logger.warning("Token without a numeric subject rejected")
        return None
    return user_id if user_id > 0 else None


def get_admin_from_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict:
    if not credentials:
        raise HTTPException(status_code=401, detail="Missing or invalid token")
    payload = decode_token(credentials.credentials)
    if not payload or payload.get("type") != "admin":
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    if not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token")
    return payload


def get_redaction_client() -> RedactionClient:
    return RedactionClient()


def get_chat_service(
    db: Session = Depends(get_db),
    client: RedactionClient = Depends(get_redaction_client),
) -> ChatService:
    return ChatService(db, client)
