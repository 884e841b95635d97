"""Create chat tables; optionally print a development token.

    python scripts/init_db.py            # tables only
    python scripts/init_db.py 7          # + token for user 7
    python scripts/init_db.py 1 admin    # + admin token (upstream settings API)
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.db.session import SessionLocal, engine, Base
from app.models import ChatSession, ChatMessage, UpstreamSettings  # noqa: F401
from app.core.config import get_upstream_api_key
from app.core.security import create_token

Base.metadata.create_all(bind=engine)
print("hipaaichat tables ready")

db = SessionLocal()
if not db.query(UpstreamSettings).first():
    db.add(UpstreamSettings())
    db.commit()
    source = "env UPSTREAM_API_KEY" if get_upstream_api_key() else "not configured yet"
    print(f"Created upstream settings row (API key: {source})")
db.close()

if len(sys.argv) > 1:
    user_id = sys.argv[1]
    claims = {"sub": str(user_id)}
    if len(sys.argv) > 2 and sys.argv[2] == "admin":
        claims["type"] = "admin"
    print(f"Token for user {user_id}: {create_token(claims)}")
print("Init complete.")
