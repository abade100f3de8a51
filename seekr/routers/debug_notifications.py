"""Debug notification records API router for the Seekr review notifier."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from seekr.config import Settings
from seekr.dependencies import get_app_settings, get_store
from seekr.exceptions import StoreError
from seekr.models.debug_notification import DebugNotificationList, DebugNotificationRecord, DebugStatus
from seekr.services.ports import DocumentStore

router = APIRouter(prefix="/api/debug-notifications", tags=["debug"])


@router.get("", response_model=DebugNotificationList)
async def list_debug_notifications(
    review_id: Optional[str] = Query(None, description="Only records for this review"),
    status: Optional[DebugStatus] = Query(None, description="Filter by outcome"),
    limit: int = Query(50, ge=1, le=500, description="Maximum records returned"),
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> DebugNotificationList:
    """
    List audit records, newest first.

    - **review_id**: Only records written for this review
    - **status**: Only records with this outcome
    """
    filters = {}
    if review_id:
        filters["reviewId"] = review_id
    if status:
        filters["status"] = status.value

    try:
        documents = await store.query_documents(settings.debug_collection, filters, limit)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=f"Error fetching debug notifications: {str(e)}")

    records = [DebugNotificationRecord.model_validate(doc) for doc in documents]
    return DebugNotificationList(records=records, total=len(records))
