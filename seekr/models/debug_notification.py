"""Audit records written once per notification pipeline run."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class DebugStatus(str, Enum):
    """Terminal outcome of one pipeline run."""

    MISSING_REVIEW = "missing_review"
    HUNT_NOT_FOUND = "hunt_not_found"
    NO_TOKEN = "no_token"
    SENT = "sent"
    SEND_ERROR = "send_error"


class DebugNotificationRecord(BaseModel):
    """One appended audit entry.

    ``timestamp`` is assigned by the backing store when the record is
    appended and is only populated on records read back from it.
    """

    status: DebugStatus
    review_id: str = Field(..., alias="reviewId")
    hunt_id: Optional[str] = Field(default=None, alias="huntId")
    owner_id: Optional[str] = Field(default=None, alias="ownerId")
    token: Optional[str] = None
    error: Optional[str] = None
    timestamp: Optional[datetime] = None

    class Config:
        populate_by_name = True
        extra = "ignore"
        json_schema_extra = {
            "example": {
                "status": "sent",
                "reviewId": "r1",
                "huntId": "h1",
                "ownerId": "u1",
                "token": "TOK",
                "timestamp": "2024-01-15T10:30:00Z"
            }
        }

    def to_document(self) -> Dict[str, Any]:
        """Stored shape: camelCase keys, absent fields omitted, no timestamp."""
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
            exclude={"timestamp"},
        )


class DebugNotificationList(BaseModel):
    """List of audit records with metadata."""

    records: List[DebugNotificationRecord]
    total: int
