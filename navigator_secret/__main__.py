"""Operator CLI for session secrets.

Usage:
    python -m navigator_secret generate [--json]
    python -m navigator_secret rotate
    python -m navigator_secret path
"""
import sys
import asyncio
import logging
import argparse
from typing import Optional

import orjson

from .conf import ENV_SESSION_SECRET
from .exceptions import SecretError
from .provider import SecretConfig, SecretProvider, generate_secret

logger = logging.getLogger("navigator.secret")

_USAGE = f"""
Add it to your environment before starting the server:

    export {ENV_SESSION_SECRET}={{secret}}

or put it in your .env file:

    {ENV_SESSION_SECRET}={{secret}}
"""


def _generate(args: argparse.Namespace) -> int:
    secret = generate_secret()
    if args.json:
        sys.stdout.write(
            orjson.dumps({"secret": secret, "length": len(secret)}).decode()
        )
        sys.stdout.write("\n")
    else:
        print(f"Generated 32-byte secret: {secret}")
        print(_USAGE.format(secret=secret))
    return 0


def _rotate(args: argparse.Namespace) -> int:
    provider = SecretProvider(SecretConfig.from_env())
    asyncio.run(provider.rotate())
    print(f"Rotated session secret at {provider.config.secret_path}")
    print(f"Previous secret kept at {provider.config.previous_path}")
    print("Restart the server to start signing sessions with the new secret.")
    return 0


def _path(args: argparse.Namespace) -> int:
    print(SecretProvider(SecretConfig.from_env()).location.identifier)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="navigator-secret",
        description="Session secret maintenance CLI",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    p_gen = sub.add_parser("generate", help="Generate a new session secret")
    p_gen.add_argument("--json", action="store_true", help="JSON output")
    p_gen.set_defaults(func=_generate)
    p_rot = sub.add_parser(
        "rotate", help="Rotate the file-backed secret, keeping the previous one"
    )
    p_rot.set_defaults(func=_rotate)
    p_path = sub.add_parser("path", help="Show where the active secret is kept")
    p_path.set_defaults(func=_path)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except SecretError as err:
        print(f"error: {err}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
