#!/usr/bin/env python3
"""
Register a push messaging token on a profile.

Writes ``author.fcmToken`` the same way the mobile client does when the
messaging provider rotates its token. Useful for pointing a hunt owner at a
test device.
"""

import asyncio
import sys
from pathlib import Path

# Allow running as script or module
if __name__ == "__main__" and __package__ is None:
    sys.path.insert(0, str(Path(__file__).parent.parent))

import click

from admin.utils.cli import (
    common_options,
    echo_error,
    echo_info,
    echo_success,
    settings_options,
)
from seekr.config import Settings
from seekr.dependencies import close_services, get_store, init_services
from seekr.exceptions import StoreError
from seekr.routers.profiles import FCM_TOKEN_FIELD


async def register(profile_id: str, token: str, settings: Settings) -> None:
    await init_services(settings)
    try:
        store = await get_store()
        await store.set_field(settings.profiles_collection, profile_id, FCM_TOKEN_FIELD, token)
    finally:
        await close_services()


@click.command()
@click.argument("profile_id")
@click.argument("token")
@common_options
@settings_options
def main(profile_id: str, token: str, dry_run: bool, verbose: bool, settings: Settings):
    """
    Set PROFILE_ID's messaging token to TOKEN.

    Examples:

        python -m admin.register_token u1 dXJ0...
    """
    if dry_run:
        echo_info(f"[DRY RUN] Would set {FCM_TOKEN_FIELD} on profile {profile_id}")
        return

    try:
        asyncio.run(register(profile_id, token, settings))
    except StoreError as e:
        echo_error(f"Failed to save token: {e}")
        raise SystemExit(1)

    echo_success(f"Token saved for profile {profile_id}")


if __name__ == "__main__":
    main()
