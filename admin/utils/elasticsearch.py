"""
Synchronous Elasticsearch access for the Seekr admin commands.

The client is built from the same settings as the notifier's async client,
so cloud ID, API key and basic auth behave identically in both.
"""

from elasticsearch import Elasticsearch

from admin.utils.cli import echo_error, echo_verbose
from seekr.config import Settings
from seekr.dependencies import es_client_kwargs


def get_es_client(settings: Settings) -> Elasticsearch:
    """Build a sync client for the cluster named in ``settings``."""
    return Elasticsearch(**es_client_kwargs(settings))


def connect(settings: Settings, verbose: bool = False) -> Elasticsearch:
    """
    Return a client after checking the cluster answers.

    Exits with status 1 when it does not.
    """
    es = get_es_client(settings)
    try:
        info = es.info()
    except Exception as e:
        echo_error(f"Failed to connect to Elasticsearch: {e}")
        echo_error("Check ELASTICSEARCH_URL / --es-url and the credentials in .env")
        raise SystemExit(1)

    echo_verbose(f"Connected to Elasticsearch {info['version']['number']}", verbose)
    return es
