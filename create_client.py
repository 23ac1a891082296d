#!/usr/bin/env python3
"""
Create a client account together with its wedding.

The script talks to the backend directly with the public API key,
exactly as the dashboard's "new client" form does: it signs the user up,
creates the profile row (ignoring "already exists", since a database
trigger may have created it) and inserts the wedding linked to the
given organizer.  Depending on the auth settings the new user may have
to confirm the email address before signing in.

Usage:
    python create_client.py --email couple@example.com --organizer-id <uuid> \
        --names "Константин" "Диана" --date 2026-05-28 --venue "One & Only" --country "Черногория"

If --password is omitted, you will be prompted to enter it securely.
"""

import argparse
import getpass
import logging
import sys
from typing import Any, Dict, Optional, Tuple

import requests

from wedding_planner_api.app.core.backend import UNIQUE_VIOLATION_CODE
from wedding_planner_api.app.core.config import settings
from wedding_planner_api.app.core.logging_config import setup_logging

logger = logging.getLogger("create_client")


class AdminBackend:
    """Minimal synchronous backend client for one-off admin scripts."""

    def __init__(self, base_url: str, api_key: str) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.session = requests.Session()

    def _request(
        self, method: str, path: str, json_body: Any = None, prefer: Optional[str] = None
    ) -> Tuple[Optional[Any], Optional[Dict[str, Any]]]:
        url = f"{self.base_url}{path}"
        headers = {"apikey": self.api_key, "Authorization": f"Bearer {self.api_key}"}
        if prefer:
            headers["Prefer"] = prefer
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(method, url, json=json_body, headers=headers, timeout=15)
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            code, message = None, ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    code = err_json.get("code") or err_json.get("error_code")
                    message = err_json.get("message") or err_json.get("msg") or str(err_json)
                except ValueError:
                    message = exc.response.text
            return None, {"status_code": status, "code": str(code) if code else None, "message": message or str(exc)}
        except requests.RequestException as exc:
            return None, {"status_code": None, "code": None, "message": str(exc)}

    def sign_up(self, email: str, password: str, metadata: Dict[str, Any]):
        data, error = self._request(
            "POST", "/auth/v1/signup", {"email": email, "password": password, "data": metadata}
        )
        if isinstance(data, dict) and isinstance(data.get("user"), dict):
            data = data["user"]
        return data, error

    def insert(self, table: str, row: Dict[str, Any]):
        data, error = self._request("POST", f"/rest/v1/{table}", row, prefer="return=representation")
        if isinstance(data, list):
            data = data[0] if data else None
        return data, error


def main() -> None:
    ap = argparse.ArgumentParser(description="Create a client account and its wedding.")
    ap.add_argument("--email", required=True, help="Client email")
    ap.add_argument("--password", help="Password (min. 6 characters). If omitted, you'll be prompted.")
    ap.add_argument("--names", nargs=2, required=True, metavar=("PARTNER1", "PARTNER2"))
    ap.add_argument("--date", required=True, help="Wedding date, YYYY-MM-DD")
    ap.add_argument("--venue", required=True)
    ap.add_argument("--country", required=True)
    ap.add_argument("--organizer-id", required=True, help="Profile id of the organizer")
    ap.add_argument("--guests", type=int, default=0)
    args = ap.parse_args()

    setup_logging(settings.log_level)

    password = args.password or getpass.getpass("Enter password for the client: ")
    if len(password) < 6:
        print("[!] Password must be at least 6 characters.", file=sys.stderr)
        sys.exit(1)

    backend = AdminBackend(settings.backend_url, settings.backend_anon_key)
    name = f"{args.names[0]} & {args.names[1]}"

    user, error = backend.sign_up(args.email, password, {"name": name, "role": "client"})
    if error or not user or not user.get("id"):
        print(f"[!] Sign-up failed: {(error or {}).get('message', 'no user returned')}", file=sys.stderr)
        sys.exit(2)
    user_id = user["id"]
    print(f"[+] User created: {user_id}")

    _, error = backend.insert("profiles", {"id": user_id, "email": args.email, "name": name, "role": "client"})
    if error and error.get("code") != UNIQUE_VIOLATION_CODE:
        logger.warning("Profile was not created: %s", error.get("message"))

    wedding, error = backend.insert(
        "weddings",
        {
            "client_id": user_id,
            "organizer_id": args.organizer_id,
            "couple_name_1_en": args.names[0],
            "couple_name_2_en": args.names[1],
            "wedding_date": args.date,
            "venue": args.venue,
            "country": args.country,
            "guest_count": args.guests,
        },
    )
    if error or not wedding:
        print(f"[!] Wedding was not created: {(error or {}).get('message', 'empty response')}", file=sys.stderr)
        sys.exit(3)
    print(f"[+] Wedding created: {wedding.get('id')} for {name}")


if __name__ == "__main__":
    main()
