from . import models  # noqa: F401
from .session import SessionLocal, init_db, make_engine

__all__ = [
    "models",
    "SessionLocal",
    "init_db",
    "make_engine",
]
