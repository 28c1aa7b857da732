"""Health endpoint."""

import shutil

from fastapi import APIRouter
from sqlalchemy import text

from fleetops import __version__
from fleetops.api.deps import SessionDep

router = APIRouter(tags=["health"])


@router.get("/health")
def health(session: SessionDep) -> dict:
    """Report service version, database reachability and Tesseract presence."""
    session.execute(text("SELECT 1"))
    return {
        "status": "ok",
        "version": __version__,
        "database": True,
        "tesseractAvailable": shutil.which("tesseract") is not None,
    }
