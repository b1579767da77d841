"""Command-line interface for the user directory service."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from typing import Sequence

import httpx

from user_api.config import ServiceConfig, load_config, resolve_config_path
from user_api.errors import ConfigError

logger = logging.getLogger("userdirectory.main")

_DEFAULT_SERVICE_URL = "http://localhost:8000"


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="User directory service utilities")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML configuration file (default: USER_API_CONFIG or config/service.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP service")
    serve_parser.add_argument("--host", default=None, help="Bind address for the API")
    serve_parser.add_argument("--port", type=int, default=None, help="Port for the HTTP API")
    serve_parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Logging level (default: USER_API_LOG_LEVEL or INFO)",
    )

    users_parser = subparsers.add_parser(
        "users", help="List the users stored by a running service"
    )
    users_parser.add_argument(
        "--service-url",
        default=None,
        help=f"Base URL of a running service (default: {_DEFAULT_SERVICE_URL})",
    )
    users_parser.add_argument(
        "--token",
        default=None,
        help="Bearer token to present (default: the configured API token)",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "users"}

    # The global --config option may precede the (optional) subcommand.
    global_args: list[str] = []
    if args_list and args_list[0].startswith("--config="):
        global_args, args_list = args_list[:1], args_list[1:]
    elif args_list and args_list[0] == "--config":
        global_args, args_list = args_list[:2], args_list[2:]

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args([*global_args, *args_list])
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args([*global_args, *args_list])
            args_list = ["serve", *args_list]

    return parser.parse_args([*global_args, *args_list])


def _load_config(config_arg: str | None) -> ServiceConfig:
    explicit = config_arg or os.getenv("USER_API_CONFIG")
    config_path = resolve_config_path(explicit)
    try:
        return load_config(config_path, required=bool(explicit))
    except ConfigError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc


def _serve(config: ServiceConfig) -> None:
    from user_api.service import create_app
    import uvicorn

    logger.info("Starting user directory API on http://%s:%s", config.host, config.port)

    app = create_app(api_token=config.api_token)
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


def _show_users(service_url: str, token: str) -> int:
    endpoint = service_url.rstrip("/") + "/users"

    try:
        response = httpx.get(
            endpoint,
            headers={"Authorization": f"Bearer {token}"},
            timeout=10.0,
        )
    except httpx.HTTPError as exc:
        print(f"Failed to contact user service: {exc}")
        return 1

    if response.status_code == 401:
        print("Authentication failed when querying the user service. Verify the configured token.")
        return 1
    if response.status_code != 200:
        print(f"Service responded with {response.status_code}: {response.text.strip()}")
        return 1

    try:
        users = response.json()
    except ValueError:
        print("Service returned an unexpected response format.")
        return 1

    if not users:
        print("No users are currently registered.")
        return 0

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':>4}  {'Name':<24}  Email")
    print("-" * 64)
    for user in users:
        print(f"{user.get('id', '?'):>4}  {user.get('name', ''):<24}  {user.get('email', '')}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    args = _parse_args(argv)
    config = _load_config(args.config)

    if args.command == "serve":
        config = ServiceConfig(
            host=getattr(args, "host", None) or config.host,
            port=getattr(args, "port", None) or config.port,
            api_token=config.api_token,
            log_level=getattr(args, "log_level", None) or config.log_level,
        )

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    if args.command == "serve":
        _serve(config)
    elif args.command == "users":
        return _show_users(
            args.service_url or _DEFAULT_SERVICE_URL,
            args.token or config.api_token,
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
