"""Message processing API routes."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from taskline.config import local_today
from taskline.domain.errors import MessageNotFound
from taskline.domain.processor import parse_message
from taskline.jobs import MessageParsingJob

message_router = APIRouter(prefix="/messages", tags=["Messages"])

# Set by the server on startup
job: Optional[MessageParsingJob] = None


class ParseRequest(BaseModel):
    text: str


class ParseResponse(BaseModel):
    intent_type: str
    confidence_score: float
    extracted_data: Dict[str, Any]


class ProcessResponse(BaseModel):
    success: bool
    intent_type: Optional[str] = None
    confidence_score: Optional[float] = None
    extracted_data: Dict[str, Any] = {}
    task_id: Optional[int] = None
    task_title: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    resolved_user_id: Optional[int] = None
    status_summary: Optional[Dict[str, int]] = None


def _run(message_id: int, retry: bool) -> ProcessResponse:
    if job is None:
        raise HTTPException(status_code=503, detail="Message processing not configured")
    try:
        result = job.perform(message_id, retry=retry)
    except MessageNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ProcessResponse(**result.to_dict())


@message_router.post("/parse", response_model=ParseResponse)
def parse(req: ParseRequest):
    """Classify text without touching any stored state."""
    classification, extracted = parse_message(req.text, today=local_today())
    return ParseResponse(
        intent_type=classification.intent,
        confidence_score=classification.confidence,
        extracted_data=extracted.to_dict(),
    )


@message_router.post("/{message_id}/process", response_model=ProcessResponse)
def process(message_id: int):
    return _run(message_id, retry=False)


@message_router.post("/{message_id}/retry", response_model=ProcessResponse)
def retry(message_id: int):
    return _run(message_id, retry=True)
