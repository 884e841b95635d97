from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from app.db.session import Base


class UpstreamSettings(Base):
    __tablename__ = "hipaaichat_upstream_settings"

    id = Column(Integer, primary_key=True, index=True)
    api_key = Column(String(255), nullable=True)  # null = use env
    endpoint_url = Column(String(255), nullable=True)  # null = use env / default
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
