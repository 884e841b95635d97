from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.upstream_settings import UpstreamSettings
from app.core.errors import ChatError
from app.core.upstream import UpstreamConfig, get_upstream_config
from app.api.deps import get_admin_from_token, get_redaction_client
from app.schemas.upstream_settings import UpstreamSettingsSaveRequest, UpstreamTestRequest

router = APIRouter(prefix="/api", tags=["Upstream"])

TEST_TRANSCRIPT = "User: Hi"


def _mask_key(key: str) -> str:
    if not key or len(key) < 8:
        return "***"
    return key[:3] + "***" + key[-3:]


def _get_settings(db: Session) -> UpstreamSettings | None:
    return db.query(UpstreamSettings).first()


@router.get("/upstream")
def get_upstream_settings(db: Session = Depends(get_db), admin=Depends(get_admin_from_token)):
    settings = _get_settings(db)
    config = get_upstream_config(db)
    return {
        "apiKey": None,
        "apiKeyMasked": _mask_key(config.api_key) if config.api_key else None,
        "endpointUrl": config.url,
        "timeoutSeconds": config.timeout,
        "updatedAt": settings.updated_at.isoformat() if settings and settings.updated_at else None,
    }


@router.put("/upstream")
def save_upstream_settings(
    data: UpstreamSettingsSaveRequest,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_from_token),
):
    settings = _get_settings(db)
    if not settings:
        settings = UpstreamSettings()
        db.add(settings)
        db.flush()
    if data.api_key is not None:
        settings.api_key = data.api_key.strip() or None
    if data.endpoint_url is not None:
        url = data.endpoint_url.strip()
        if url and not url.startswith(("http://", "https://")):
            raise HTTPException(status_code=400, detail="endpointUrl must start with http:// or https://")
        settings.endpoint_url = url or None
    db.commit()
    db.refresh(settings)
    return {"success": True}


@router.post("/upstream/test")
def test_upstream(
    data: UpstreamTestRequest,
    db: Session = Depends(get_db),
    admin=Depends(get_admin_from_token),
    client=Depends(get_redaction_client),
):
    config = get_upstream_config(db)
    key = (data.api_key or "").strip() or config.api_key
    if not key:
        return {"success": False, "error": "No API key provided"}
    try:
        client.reply(UpstreamConfig(url=config.url, api_key=key, timeout=config.timeout), TEST_TRANSCRIPT)
    except ChatError as e:
        return {"success": False, "error": e.safe_message}
    return {"success": True, "message": "Connection successful", "endpointUrl": config.url}
