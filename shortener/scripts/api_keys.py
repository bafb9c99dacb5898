"""
API key administration.

Keys are shown once, at issue time; only their digest is stored.

Usage:
    python -m shortener.scripts.api_keys issue [--label LABEL]
    python -m shortener.scripts.api_keys revoke KEY_ID
"""

import argparse
import asyncio
import sys
from typing import Optional, Sequence

from shortener.core.logging_config import setup_logging
from shortener.core.setting import settings
from shortener.db.session import async_session_maker, engine
from shortener.services.api_key_service import ApiKeyService


async def issue_key(label: Optional[str]) -> int:
    async with async_session_maker() as session:
        api_key, raw_key = await ApiKeyService(session).issue(label=label)

    print(f"API key id:    {api_key.id}")
    print(f"Owner id:      {ApiKeyService.owner_id_for(api_key)}")
    print(f"API key:       {raw_key}")
    print("Store the key now, it cannot be shown again.")
    return 0


async def revoke_key(key_id: int) -> int:
    async with async_session_maker() as session:
        revoked = await ApiKeyService(session).revoke(key_id)

    if not revoked:
        print(f"API key {key_id} not found", file=sys.stderr)
        return 1

    print(f"API key {key_id} revoked")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m shortener.scripts.api_keys",
        description="Issue and revoke API keys for the public shorten API"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    issue_parser = subparsers.add_parser("issue", help="Issue a new API key")
    issue_parser.add_argument("--label", default=None, help="Human-readable name for the key")

    revoke_parser = subparsers.add_parser("revoke", help="Revoke an API key")
    revoke_parser.add_argument("key_id", type=int, help="Id printed when the key was issued")

    return parser


async def run(args: argparse.Namespace) -> int:
    try:
        if args.command == "issue":
            return await issue_key(args.label)
        return await revoke_key(args.key_id)
    finally:
        await engine.dispose()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(settings.LOG_LEVEL)
    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
