# Database Connection and Base Models

from banqa.db.base import Base
from banqa.db.session import get_async_engine, get_async_session, get_async_session_maker

__all__ = ["Base", "get_async_engine", "get_async_session", "get_async_session_maker"]
