"""Resolution of a reviewed hunt to its owner's push token.

Each lookup returns one of three result objects instead of raising or
returning None, so the trigger can branch on the outcome explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from pydantic import ValidationError

from seekr.exceptions import StoreError
from seekr.models.hunt import Hunt, Profile
from seekr.services.ports import DocumentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HuntNotFound:
    """The reviewed hunt could not be read."""

    error: Optional[str] = None


@dataclass(frozen=True)
class NoToken:
    """The hunt exists but its owner has no registered token."""

    hunt: Hunt
    owner_id: Optional[str]
    error: Optional[str] = None


@dataclass(frozen=True)
class OwnerFound:
    """Hunt and owner token both resolved."""

    token: str
    hunt: Hunt
    owner_id: str


OwnerResolution = Union[OwnerFound, HuntNotFound, NoToken]


class OwnerResolver:
    """Looks up a hunt, then its owner's profile, in that order."""

    def __init__(self, store: DocumentStore, hunts_collection: str, profiles_collection: str) -> None:
        self._store = store
        self._hunts = hunts_collection
        self._profiles = profiles_collection

    async def resolve(self, hunt_id: Optional[str]) -> OwnerResolution:
        """Translate a hunt ID into the owner's token.

        Read failures from the store, and documents that do not parse, are
        treated as absence: the run ends without a send and the failure text
        travels in the result.
        """
        if not hunt_id:
            return HuntNotFound()

        try:
            hunt_doc = await self._store.get_document(self._hunts, hunt_id)
        except StoreError as e:
            logger.warning("Hunt lookup failed for %s: %s", hunt_id, e)
            return HuntNotFound(error=str(e))

        if hunt_doc is None:
            return HuntNotFound()

        try:
            hunt = Hunt.model_validate(hunt_doc)
        except ValidationError as e:
            logger.warning("Unreadable hunt %s: %s", hunt_id, e)
            return HuntNotFound(error=str(e))

        owner_id = hunt.author_id or None
        logger.info("Hunt owner: %s", owner_id)

        if owner_id is None:
            return NoToken(hunt=hunt, owner_id=None)

        try:
            profile_doc = await self._store.get_document(self._profiles, owner_id)
        except StoreError as e:
            logger.warning("Profile lookup failed for %s: %s", owner_id, e)
            return NoToken(hunt=hunt, owner_id=owner_id, error=str(e))

        try:
            token = Profile.model_validate(profile_doc).fcm_token if profile_doc else None
        except ValidationError as e:
            logger.warning("Unreadable profile %s: %s", owner_id, e)
            return NoToken(hunt=hunt, owner_id=owner_id, error=str(e))

        if token is None:
            return NoToken(hunt=hunt, owner_id=owner_id)

        return OwnerFound(token=token, hunt=hunt, owner_id=owner_id)
