from __future__ import annotations

import click
import pytest
from click.testing import CliRunner

from admin import register_token
from admin.utils import elasticsearch as admin_es
from admin.utils.cli import common_options, load_settings, settings_options
from seekr.config import Settings, get_settings
from seekr.dependencies import es_client_kwargs


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@click.command()
@common_options
@settings_options
def show(dry_run: bool, verbose: bool, settings: Settings) -> None:
    click.echo(f"{settings.elasticsearch_url}|{settings.reviews_collection}|{dry_run}")


def test_es_url_option_overrides_configured_cluster() -> None:
    result = CliRunner().invoke(show, ["--es-url", "https://es.example:9243", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == "https://es.example:9243|hunts_reviews|True"


def test_load_settings_drops_cloud_id_when_url_given(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ELASTICSEARCH_CLOUD_ID", "deployment:abc")

    settings = load_settings(es_url="http://localhost:9200")

    assert settings.es_cloud_id is None
    assert es_client_kwargs(settings)["hosts"] == ["http://localhost:9200"]


def test_client_kwargs_prefer_api_key_over_basic_auth() -> None:
    settings = Settings(
        elasticsearch_url="http://es:9200",
        es_api_key="KEY",
        es_username="elastic",
        es_password="secret",
        es_verify_certs=False,
    )

    kwargs = es_client_kwargs(settings)

    assert kwargs == {"hosts": ["http://es:9200"], "api_key": "KEY", "verify_certs": False}


def test_connect_exits_when_cluster_unreachable(monkeypatch: pytest.MonkeyPatch) -> None:
    class Unreachable:
        def info(self):
            raise ConnectionRefusedError("connection refused")

    monkeypatch.setattr(admin_es, "get_es_client", lambda settings: Unreachable())

    with pytest.raises(SystemExit) as excinfo:
        admin_es.connect(Settings())

    assert excinfo.value.code == 1


def test_register_token_dry_run_writes_nothing(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fail_register(*args, **kwargs):
        raise AssertionError("dry run must not touch the store")

    monkeypatch.setattr(register_token, "register", fail_register)

    result = CliRunner().invoke(register_token.main, ["u1", "TOK", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "author.fcmToken" in result.output
