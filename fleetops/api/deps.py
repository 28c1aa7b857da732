"""Request-scoped dependencies resolved from ``app.state``."""

from collections.abc import Iterator
from typing import Annotated, TypeVar

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from fleetops.db.session import Database
from fleetops.ocr.recognizer import OrderRecognizer

T = TypeVar("T")


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_session(request: Request) -> Iterator[Session]:
    """One session per request. Handlers commit explicitly."""
    session = get_database(request).session_factory()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_recognizer(request: Request) -> OrderRecognizer:
    return request.app.state.recognizer


SessionDep = Annotated[Session, Depends(get_session)]
RecognizerDep = Annotated[OrderRecognizer, Depends(get_recognizer)]


def get_or_404(session: Session, model: type[T], key: str, label: str) -> T:
    """Load a row by primary key or raise a 404 naming what was missing."""
    row = session.get(model, key)
    if row is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return row
