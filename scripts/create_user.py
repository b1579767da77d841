import argparse
import os
import sys
from pathlib import Path

import httpx

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from user_api.config import DEFAULT_API_TOKEN


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a user on a running user directory service")
    parser.add_argument("name", help="Display name for the user")
    parser.add_argument("email", help="Unique email address")
    parser.add_argument(
        "--service-url",
        default="http://localhost:8000",
        help="Base URL of the service (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--token",
        default=None,
        help="Bearer token (defaults to USER_API_TOKEN or the built-in development token)",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    token = args.token or os.getenv("USER_API_TOKEN") or DEFAULT_API_TOKEN

    try:
        response = httpx.post(
            args.service_url.rstrip("/") + "/users",
            json={"name": args.name, "email": args.email},
            headers={"Authorization": f"Bearer {token}"},
            timeout=10.0,
        )
    except httpx.HTTPError as exc:
        print(f"Error: could not reach {args.service_url}: {exc}", file=sys.stderr)
        return 1

    if response.status_code != 201:
        print(f"Error ({response.status_code}): {response.text.strip()}", file=sys.stderr)
        return 1

    user = response.json()
    print(f"Created user #{user['id']}: {user['name']} <{user['email']}>")
    print(f"Location: {response.headers.get('location', '')}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
