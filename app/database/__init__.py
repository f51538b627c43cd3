from app.database.base import Base
from app.database.engine import build_engine, engine
from app.database.session import SessionLocal, commit_or_raise, get_db

__all__ = ["Base", "SessionLocal", "build_engine", "commit_or_raise", "engine", "get_db"]
