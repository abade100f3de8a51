"""Dependency wiring for the Seekr review notifier.

Client handles are created once per process here and handed to the
pipeline explicitly; nothing in ``seekr.services`` reaches for globals.
"""

import logging
import os
from typing import Optional

import firebase_admin
from elasticsearch import AsyncElasticsearch
from firebase_admin import credentials, firestore_async

from seekr.config import Settings, get_settings
from seekr.services.debug_log import DebugLogger
from seekr.services.dispatcher import NotificationDispatcher
from seekr.services.elasticsearch import ElasticsearchDocumentStore
from seekr.services.firestore import FirestoreDocumentStore
from seekr.services.messaging import FirebasePushSender, LoggingPushSender
from seekr.services.ports import DocumentStore, PushSender
from seekr.services.resolver import OwnerResolver
from seekr.services.review_trigger import ReviewNotificationTrigger

logger = logging.getLogger(__name__)

# Process-wide handles, set by init_services()
_es_client: Optional[AsyncElasticsearch] = None
_store: Optional[DocumentStore] = None
_trigger: Optional[ReviewNotificationTrigger] = None


def es_client_kwargs(settings: Settings) -> dict:
    """Connection arguments shared by the async service client and the admin CLIs."""
    kwargs = {}

    if settings.es_cloud_id:
        # Cloud connection
        kwargs["cloud_id"] = settings.es_cloud_id
    elif settings.elasticsearch_url:
        # Full URL provided (e.g., from ELASTICSEARCH_URL env var)
        kwargs["hosts"] = [settings.elasticsearch_url]
    else:
        # Build from parts
        kwargs["hosts"] = [settings.es_url]

    # Authentication
    if settings.es_api_key:
        kwargs["api_key"] = settings.es_api_key
    elif settings.es_username and settings.es_password:
        kwargs["basic_auth"] = (settings.es_username, settings.es_password)

    # SSL verification
    kwargs["verify_certs"] = settings.es_verify_certs

    return kwargs


def create_es_client(settings: Settings) -> AsyncElasticsearch:
    """Build an Elasticsearch async client from settings."""
    return AsyncElasticsearch(**es_client_kwargs(settings))


def init_firebase_app(settings: Settings) -> firebase_admin.App:
    """Return the default Firebase app, initializing it on first use."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    # The Firestore client picks the emulator up from the environment
    if settings.firestore_emulator_host:
        os.environ.setdefault("FIRESTORE_EMULATOR_HOST", settings.firestore_emulator_host)

    if settings.firebase_credentials_path:
        credential = credentials.Certificate(settings.firebase_credentials_path)
    else:
        credential = credentials.ApplicationDefault()

    options = {}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id

    logger.info("Initializing Firebase app (project=%s)", settings.firebase_project_id or "default")
    return firebase_admin.initialize_app(credential, options)


def build_push_sender(settings: Settings) -> PushSender:
    """Pick the push backend named in settings."""
    if settings.push_backend == "log":
        return LoggingPushSender()
    return FirebasePushSender(app=init_firebase_app(settings), dry_run=settings.messaging_dry_run)


def build_trigger(store: DocumentStore, sender: PushSender, settings: Settings) -> ReviewNotificationTrigger:
    """Assemble the review notification pipeline around the given backends."""
    return ReviewNotificationTrigger(
        resolver=OwnerResolver(
            store,
            hunts_collection=settings.hunts_collection,
            profiles_collection=settings.profiles_collection,
        ),
        dispatcher=NotificationDispatcher(sender),
        debug_logger=DebugLogger(store, settings.debug_collection),
        max_instances=settings.max_instances,
    )


async def init_services(settings: Optional[Settings] = None) -> ReviewNotificationTrigger:
    """Create the store, push sender and trigger for this process."""
    global _es_client, _store, _trigger

    if _trigger is not None:
        return _trigger

    settings = settings or get_settings()

    if settings.store_backend == "firestore":
        _store = FirestoreDocumentStore(firestore_async.client(init_firebase_app(settings)))
    else:
        _es_client = create_es_client(settings)
        _store = ElasticsearchDocumentStore(_es_client, settings.timestamp_pipeline)

    _trigger = build_trigger(_store, build_push_sender(settings), settings)
    logger.info(
        "Review notifier ready (store=%s, push=%s, max_instances=%d)",
        settings.store_backend,
        settings.push_backend,
        settings.max_instances,
    )
    return _trigger


async def close_services() -> None:
    """Close client connections."""
    global _es_client, _store, _trigger

    if _es_client is not None:
        await _es_client.close()
    _es_client = None
    _store = None
    _trigger = None


async def get_store() -> DocumentStore:
    """Dependency to get the document store."""
    if _store is None:
        await init_services()
    return _store


async def get_trigger() -> ReviewNotificationTrigger:
    """Dependency to get the review notification trigger."""
    if _trigger is None:
        await init_services()
    return _trigger


async def get_es_client() -> Optional[AsyncElasticsearch]:
    """Dependency to get the ES client; None with the Firestore backend."""
    if _store is None:
        await init_services()
    return _es_client


def get_app_settings() -> Settings:
    """Dependency to get application settings."""
    return get_settings()
