"""
Click plumbing shared by the Seekr admin commands.

Every command reads its connection details and collection names from
``seekr.config.Settings``, the same object the API and the review watcher
use, so an admin run always targets the indices the notifier writes to.
"""

import functools
from typing import Any, Callable, Optional, TypeVar

import click
from dotenv import find_dotenv, load_dotenv

from seekr.config import Settings, get_settings


F = TypeVar("F", bound=Callable[..., Any])


def load_settings(env_path: Optional[str] = None, es_url: Optional[str] = None) -> Settings:
    """
    Resolve settings for one admin run.

    Args:
        env_path: .env file to load first; defaults to the nearest one above
            the working directory
        es_url: Cluster URL that takes precedence over the configured one

    Returns:
        Settings: Fresh settings reflecting the loaded environment
    """
    dotenv_path = env_path or find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path)

    # The environment may have changed since settings were first read
    get_settings.cache_clear()
    settings = get_settings()

    if es_url:
        settings = settings.model_copy(update={"elasticsearch_url": es_url, "es_cloud_id": None})
    return settings


def settings_options(func: F) -> F:
    """
    Add --env and --es-url and hand the command a resolved ``settings``.
    """
    @click.option(
        "--env", "env_path",
        type=click.Path(exists=True, dir_okay=False),
        default=None,
        help="Load this .env file before reading settings."
    )
    @click.option(
        "--es-url",
        default=None,
        help="Elasticsearch URL (overrides ELASTICSEARCH_URL and config.yaml)."
    )
    @functools.wraps(func)
    def wrapper(*args, env_path, es_url, **kwargs):
        return func(*args, settings=load_settings(env_path, es_url), **kwargs)

    return wrapper  # type: ignore


def common_options(func: F) -> F:
    """Add --dry-run and --verbose/-v."""
    @click.option("--dry-run", is_flag=True, help="Show what would change without changing it.")
    @click.option("--verbose", "-v", is_flag=True, help="Print per-step detail.")
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)

    return wrapper  # type: ignore


def _echo(tag: str, color: str, message: str, err: bool = False) -> None:
    click.secho(f"[{tag}] {message}", fg=color, err=err)


def echo_success(message: str) -> None:
    _echo("OK", "green", message)


def echo_info(message: str) -> None:
    _echo("INFO", "blue", message)


def echo_warning(message: str) -> None:
    _echo("WARNING", "yellow", message, err=True)


def echo_error(message: str) -> None:
    _echo("ERROR", "red", message, err=True)


def echo_verbose(message: str, verbose: bool) -> None:
    if verbose:
        _echo("DEBUG", "cyan", message)
