import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import get_cors_origins, get_log_level
from app.db.session import engine, Base
from app.models import ChatSession, ChatMessage, UpstreamSettings  # noqa: F401
from app.api.chat import router as chat_router
from app.api.upstream_settings import router as upstream_settings_router

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("hipaai-chat")

app = FastAPI(title="HIPAAi Chat API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create tables
Base.metadata.create_all(bind=engine)

# Include routers
app.include_router(chat_router)
app.include_router(upstream_settings_router)


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
