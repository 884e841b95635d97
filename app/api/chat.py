"""
Chat API — one entry point, dispatched on ?action= and the HTTP method.

Every response is {"success": bool, ...}: "data" on success, "error" + "debug_message" on failure.
Order: auth (401) → action/method (404/405) → input (400) → ChatService.
ChatService calls block (DB + upstream HTTP), so they run in the threadpool.
"""
import json
import logging
from typing import Callable

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.api.deps import get_caller_id, get_chat_service
from app.core.errors import ChatError, ErrorKind, GENERIC_ERROR_MESSAGE
from app.schemas.chat import SendMessageRequest
from app.services.chat_service import ChatService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Chat"])


def _ok(data) -> JSONResponse:
    return JSONResponse(status_code=200, content={"success": True, "data": data})


def _fail(kind: ErrorKind, error: str, status_code: int | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code or kind.status_code,
        content={"success": False, "error": error, "debug_message": kind.value},
    )


def _parse_chat_id(raw: str | None) -> int:
    if raw is None or not raw.strip():
        raise ChatError(ErrorKind.BAD_REQUEST, "Missing chat_id.")
    raw = raw.strip()
    if not (raw.isascii() and raw.isdigit()):
        raise ChatError(ErrorKind.BAD_REQUEST, "Invalid chat_id.")
    chat_id = int(raw)
    if chat_id <= 0:
        raise ChatError(ErrorKind.BAD_REQUEST, "Invalid chat_id.")
    return chat_id


async def _parse_send_body(request: Request) -> SendMessageRequest:
    raw = await request.body()
    try:
        payload = json.loads(raw or b"")
    except ValueError:
        raise ChatError(ErrorKind.BAD_REQUEST, "Invalid JSON body.")
    if not isinstance(payload, dict):
        raise ChatError(ErrorKind.BAD_REQUEST, "Invalid JSON body.")
    try:
        return SendMessageRequest.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or "body"
        raise ChatError(ErrorKind.BAD_REQUEST, f"Invalid {field}.")


async def get_chats(request: Request, caller_id: int, service: ChatService):
    return await run_in_threadpool(service.list_sessions, caller_id)


async def create_chat(request: Request, caller_id: int, service: ChatService):
    return await run_in_threadpool(service.create_session, caller_id)


async def get_messages(request: Request, caller_id: int, service: ChatService):
    chat_id = _parse_chat_id(request.query_params.get("chat_id"))
    return await run_in_threadpool(service.list_messages, caller_id, chat_id)


async def send_message(request: Request, caller_id: int, service: ChatService):
    body = await _parse_send_body(request)
    return await run_in_threadpool(service.send_message, caller_id, body.chat_id, body.message_content)


async def delete_chat(request: Request, caller_id: int, service: ChatService):
    chat_id = _parse_chat_id(request.query_params.get("chat_id"))
    return await run_in_threadpool(service.delete_session, caller_id, chat_id)


ACTIONS: dict[str, tuple[str, Callable]] = {
    "getChats": ("GET", get_chats),
    "createChat": ("POST", create_chat),
    "getMessages": ("GET", get_messages),
    "sendMessage": ("POST", send_message),
    "deleteChat": ("DELETE", delete_chat),
}


@router.api_route("/chat", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def chat_api(
    request: Request,
    caller_id: int | None = Depends(get_caller_id),
    service: ChatService = Depends(get_chat_service),
):
    if caller_id is None:
        return _fail(ErrorKind.UNAUTHENTICATED, "User not authenticated.")

    action = request.query_params.get("action")
    entry = ACTIONS.get(action or "")
    if entry is None:
        return _fail(ErrorKind.NOT_FOUND, "Unknown API action requested.")
    method, handler = entry
    if request.method != method:
        return _fail(ErrorKind.METHOD_NOT_ALLOWED, f"Method Not Allowed for {action}")

    try:
        data = await handler(request, caller_id, service)
    except ChatError as e:
        if not e.kind.exposed:
            logger.error("API action '%s' failed for user %s: %s", action, caller_id, e.message)
        return _fail(e.kind, e.safe_message, e.status_code)
    except Exception:
        logger.exception("API error in action '%s' for user %s", action, caller_id)
        return _fail(ErrorKind.INTERNAL, GENERIC_ERROR_MESSAGE)
    return _ok(data)
