"""Store tool credentials for a user in the settings store.

Usage:
    python -m scripts.set_user_keys --user-id u1 --key google_maps_api_key=AIza...
    python -m scripts.set_user_keys --user-id u1 --clear
"""

import argparse
import asyncio

from gateway.core.redis import close_redis, init_redis
from gateway.services.user_settings_service import UserSettingsService


def _parse_pairs(pairs: list[str]) -> dict[str, str]:
    keys: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise SystemExit(f"Expected NAME=VALUE, got '{pair}'")
        keys[name.strip()] = value.strip()
    return keys


async def set_user_keys(user_id: str, keys: dict[str, str], clear: bool) -> None:
    """Write (or clear) the credential hash of one user."""
    service = UserSettingsService(await init_redis())
    try:
        if clear:
            await service.delete_api_keys(user_id)
            print(f"Cleared tool credentials of user '{user_id}'.")
            return
        await service.set_api_keys(user_id, keys)
        print(f"Stored {', '.join(sorted(keys))} for user '{user_id}'.")
    finally:
        await close_redis()


def main() -> None:
    parser = argparse.ArgumentParser(description="Manage per-user tool credentials")
    parser.add_argument("--user-id", required=True, help="User identifier")
    parser.add_argument(
        "--key",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Credential to store, e.g. firecrawl_api_key=fc-... (repeatable)",
    )
    parser.add_argument("--clear", action="store_true", help="Remove all credentials")
    args = parser.parse_args()
    keys = _parse_pairs(args.key)
    if not keys and not args.clear:
        parser.error("pass at least one --key or --clear")

    asyncio.run(set_user_keys(args.user_id, keys, args.clear))


if __name__ == "__main__":
    main()
