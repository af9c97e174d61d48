"""
Container health check for the dataset publishing API.

Exits 0 when GET /health answers 2xx with {"status": "ok"}, 1 otherwise.
HEALTHCHECK_URL overrides the target entirely; otherwise PORT and
HEALTHCHECK_PATH build a localhost URL.
"""

from __future__ import annotations

import json
import os
import sys
from urllib.error import URLError
from urllib.request import urlopen


def _target_url() -> str:
    explicit = os.getenv("HEALTHCHECK_URL", "").strip()
    if explicit:
        return explicit
    port = os.getenv("PORT", "8000")
    path = os.getenv("HEALTHCHECK_PATH", "/health")
    return f"http://127.0.0.1:{port}{path}"


def main() -> int:
    url = _target_url()
    try:
        with urlopen(url, timeout=2) as response:
            if not 200 <= response.status < 300:
                return 1
            body = json.loads(response.read().decode("utf-8") or "{}")
    except (URLError, TimeoutError, ValueError) as exc:
        print(f"healthcheck failed for {url}: {exc}", file=sys.stderr)
        return 1

    return 0 if isinstance(body, dict) and body.get("status") == "ok" else 1


if __name__ == "__main__":
    raise SystemExit(main())
