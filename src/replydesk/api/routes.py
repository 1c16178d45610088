"""
API routes for the Replydesk service.

Handlers are plain ``def`` so the blocking IMAP/SMTP work runs in the
threadpool instead of on the event loop.
"""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from replydesk.application.use_cases.build_inbox_snapshot import BuildInboxSnapshotUseCase
from replydesk.application.use_cases.send_reply import SendReplyUseCase
from replydesk.application.use_cases.suggest_replies import SuggestRepliesUseCase
from replydesk.domain.entities.reply import OutboundReply
from replydesk.errors import MailError
from replydesk.infrastructure import get_settings
from replydesk.infrastructure.factory import (
    get_send_reply_use_case,
    get_snapshot_use_case,
    get_suggest_replies_use_case,
)

router = APIRouter()


def snapshot_use_case() -> BuildInboxSnapshotUseCase:
    return get_snapshot_use_case()


def send_reply_use_case() -> SendReplyUseCase:
    return get_send_reply_use_case()


def suggest_replies_use_case() -> SuggestRepliesUseCase:
    return get_suggest_replies_use_case()


# ============================================================================
# Request/Response Models
# ============================================================================


class SendReplyRequest(BaseModel):
    """Request body for sending a reply."""

    model_config = ConfigDict(populate_by_name=True)

    to: str = Field(..., min_length=1, description="Recipient address")
    subject: str = Field(..., description="Subject line")
    text: str = Field(..., min_length=1, description="Reply body")
    in_reply_to: str | None = Field(None, alias="inReplyTo", description="Message-ID being answered")


class SuggestRepliesRequest(BaseModel):
    """Request body for reply suggestions."""

    email_body: str = Field("", alias="emailBody")
    user_context: str | None = Field(None, alias="userContext")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    version: str


# ============================================================================
# Health Endpoints
# ============================================================================


@router.get("/health", response_model=HealthResponse, tags=["health"])
def health_check() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=get_settings().app_version,
    )


# ============================================================================
# Mail Endpoints
# ============================================================================


@router.get("/emails", tags=["mail"])
def list_emails(
    limit: int | None = Query(None, ge=1, le=50),
    use_case: BuildInboxSnapshotUseCase = Depends(snapshot_use_case),
) -> Any:
    """Unread messages, newest first."""
    try:
        snapshot = use_case.run(limit)
    except MailError as e:
        logger.error(f"Error fetching emails: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to fetch emails"})
    return [msg.to_dict() for msg in snapshot]


@router.post("/send-reply", tags=["mail"])
def send_reply(
    request: SendReplyRequest,
    use_case: SendReplyUseCase = Depends(send_reply_use_case),
) -> Any:
    """Send a reply; marks the original as read when inReplyTo is given."""
    reply = OutboundReply(
        to=request.to,
        subject=request.subject,
        text=request.text,
        in_reply_to=request.in_reply_to,
    )
    try:
        use_case.run(reply)
    except MailError as e:
        logger.error(f"Error sending reply: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to send reply"})
    return {"success": True}


@router.post("/suggested-replies", tags=["suggestions"])
def suggested_replies(
    request: SuggestRepliesRequest,
    use_case: SuggestRepliesUseCase = Depends(suggest_replies_use_case),
) -> Any:
    """Up to three short replies for the given email body."""
    if not request.email_body.strip():
        return JSONResponse(status_code=400, content={"error": "Email body is required"})
    return use_case.run(request.email_body, request.user_context)
