"""Utility for verifying configuration and the local credential store.

The tool performs two checks:

1. ``check`` instantiates ``AppSettings`` from the provided ``.env`` file,
   surfacing missing or malformed Reddit configuration before the service
   starts failing.
2. ``store`` opens the key-value store and reports whether a login is pending
   and whether a stored credential can be read with the configured secret.

Example usages::

    python -m scripts.check_env check --env-file /opt/saved-explorer/.env
    python -m scripts.check_env store --env-file /opt/saved-explorer/.env
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from saved_explorer.clients import SQLiteKeyValueStore
from saved_explorer.core.config import AppSettings, _load_env_file
from saved_explorer.core.errors import StorageError
from saved_explorer.services import TokenCipherService
from saved_explorer.services.session import ACCESS_KEY, AUTH_STATE_KEY

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_STORE_ERROR = 3
EXIT_RUNTIME_ERROR = 5


def _load_settings(env_file: Path) -> AppSettings:
    """Ensure required settings can be loaded from the supplied env file."""
    _load_env_file(str(env_file))
    return AppSettings()  # type: ignore[call-arg]


def _report_store(settings: AppSettings) -> int:
    """Print the state of the stored OAuth nonce and access credential."""
    try:
        store = SQLiteKeyValueStore(settings.storage.db_path)
        auth_state = store.get(AUTH_STATE_KEY)
        access = store.get(ACCESS_KEY)
    except StorageError as exc:
        print(f"Key-value store unavailable: {exc}", file=sys.stderr)
        return EXIT_STORE_ERROR

    print(f"Store: {settings.storage.db_path}")
    print(f"  pending login: {'yes' if auth_state else 'no'}")
    if not isinstance(access, dict):
        print("  credential:    none")
        return EXIT_OK

    if not access.get("encrypted"):
        print("  credential:    stored in plaintext")
        return EXIT_OK

    secret = settings.storage.token_encryption_secret
    if not secret:
        print(
            "  credential:    encrypted, but STORAGE_TOKEN_ENCRYPTION_SECRET is unset",
            file=sys.stderr,
        )
        return EXIT_STORE_ERROR
    try:
        TokenCipherService(secret=secret).unseal(access)
    except ValueError:
        print("  credential:    encrypted with a different secret", file=sys.stderr)
        return EXIT_STORE_ERROR
    print("  credential:    encrypted, readable")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate settings and inspect the credential store."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("check", "Validate settings only."),
        ("store", "Validate settings and report the key-value store state."),
    ):
        subparser = subparsers.add_parser(name, help=help_text)
        subparser.add_argument(
            "--env-file",
            default=".env",
            type=Path,
            help="Path to the environment file (default: .env in the repo root).",
        )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    env_file: Path = args.env_file
    if not env_file.exists():
        print(f"Environment file {env_file} does not exist.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        settings = _load_settings(env_file)
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR

    if args.command == "store":
        return _report_store(settings)
    print("Settings OK.")
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
