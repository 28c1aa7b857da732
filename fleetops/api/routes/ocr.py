"""OCR-assisted order intake."""

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, File, HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

from fleetops.api.deps import RecognizerDep
from fleetops.dto import camel_alias
from fleetops.ocr.recognizer import OrderRecognizer, RecognitionError, RecognitionResult
from fleetops.parsing.order_parser import (
    OrderDraft,
    confidence_to_badge,
    parse_ocr_to_order,
)
from fleetops.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/ocr", tags=["ocr"])


def _recognize_and_parse(
    recognizer: OrderRecognizer, content: bytes
) -> tuple[RecognitionResult, OrderDraft]:
    result = recognizer.recognize(content)
    return result, parse_ocr_to_order(result.text)


@router.post("/order")
async def ocr_order(
    recognizer: RecognizerDep,
    file: Annotated[UploadFile | None, File()] = None,
) -> dict:
    """Recognise an uploaded scan and return a draft order for review.

    Args:
        file: Scanned rate confirmation or bill of lading (image or PDF).

    Returns:
        OCR confidence, its presentation badge, the raw text, and the
        parsed draft. Nothing is stored.
    """
    if file is None:
        raise HTTPException(status_code=400, detail="Missing image 'file'")
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    try:
        result, draft = await run_in_threadpool(
            _recognize_and_parse, recognizer, content
        )
    except RecognitionError as exc:
        logger.error("OCR failed for %s: %s", file.filename, exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return {
        "ok": True,
        "ocrConfidence": result.confidence,
        "confidenceBadge": confidence_to_badge(result.confidence),
        "pageCount": result.page_count,
        "text": result.text,
        "parsed": {camel_alias(key): value for key, value in asdict(draft).items()},
    }
