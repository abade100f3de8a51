"""Profiles API router for the Seekr review notifier."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from seekr.config import Settings
from seekr.dependencies import get_app_settings, get_store
from seekr.exceptions import StoreError
from seekr.models.hunt import TokenRegistration
from seekr.services.ports import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profiles", tags=["profiles"])

FCM_TOKEN_FIELD = "author.fcmToken"


@router.put("/{profile_id}/fcm-token")
async def register_fcm_token(
    profile_id: str,
    registration: TokenRegistration,
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    """
    Store a refreshed messaging token on the profile.

    Clients call this whenever the messaging provider rotates their token.
    """
    try:
        await store.set_field(settings.profiles_collection, profile_id, FCM_TOKEN_FIELD, registration.token)
    except StoreError as e:
        logger.error("Failed to save token for %s: %s", profile_id, e)
        raise HTTPException(status_code=500, detail=f"Error saving token: {str(e)}")

    logger.info("Token saved for %s", profile_id)
    return {"success": True, "profile_id": profile_id}
