"""
Client for the external redaction/LLM service.

One POST per call: body {"text": <transcript>}, header x-api-key, bounded timeout.
A success response carries {"text": <reply>}; failures carry {"error"|"detail": <message>}.
Nothing is retried.
"""
import logging
from dataclasses import dataclass

import httpx
from sqlalchemy.orm import Session

from app.core.config import get_upstream_api_key, get_upstream_timeout, get_upstream_url
from app.core.errors import ChatError, ErrorKind
from app.models.upstream_settings import UpstreamSettings

logger = logging.getLogger(__name__)

COMMUNICATION_ERROR = "Failed to communicate with the upstream service."


@dataclass(frozen=True)
class UpstreamConfig:
    url: str
    api_key: str | None
    timeout: float


def get_upstream_config(db: Session) -> UpstreamConfig:
    """Stored settings first, env second."""
    settings = db.query(UpstreamSettings).first()
    api_key = (settings.api_key or "").strip() if settings and settings.api_key else None
    url = (settings.endpoint_url or "").strip() if settings and settings.endpoint_url else None
    return UpstreamConfig(
        url=url or get_upstream_url(),
        api_key=api_key or get_upstream_api_key(),
        timeout=get_upstream_timeout(),
    )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"Upstream service returned HTTP {response.status_code}."
    if isinstance(body, dict):
        message = body.get("error") or body.get("detail")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return f"Upstream service returned HTTP {response.status_code}."


class RedactionClient:
    def __init__(self, transport: httpx.BaseTransport | None = None):
        self._transport = transport

    def reply(self, config: UpstreamConfig, transcript: str) -> str:
        try:
            with httpx.Client(timeout=config.timeout, transport=self._transport) as client:
                response = client.post(
                    config.url,
                    json={"text": transcript},
                    headers={"x-api-key": config.api_key},
                )
        except httpx.TimeoutException:
            logger.warning("Upstream call to %s timed out after %ss", config.url, config.timeout)
            raise ChatError(ErrorKind.UPSTREAM_TIMEOUT, "The upstream service did not respond in time.")
        except httpx.HTTPError as e:
            logger.error("Upstream call to %s failed: %s", config.url, e)
            raise ChatError(ErrorKind.UPSTREAM_FAILURE, COMMUNICATION_ERROR)

        if not response.is_success:
            message = _error_message(response)
            logger.error("Upstream returned HTTP %s: %s", response.status_code, message)
            raise ChatError(ErrorKind.UPSTREAM_FAILURE, message, upstream_status=response.status_code)

        try:
            body = response.json()
        except ValueError:
            logger.error("Upstream returned a non-JSON body (HTTP %s)", response.status_code)
            raise ChatError(ErrorKind.UPSTREAM_FAILURE, "Invalid response from the upstream service.")

        text = body.get("text") if isinstance(body, dict) else None
        if not isinstance(text, str):
            logger.error("Upstream response is missing the 'text' field")
            raise ChatError(ErrorKind.UPSTREAM_FAILURE, "Invalid response from the upstream service.")
        return text
