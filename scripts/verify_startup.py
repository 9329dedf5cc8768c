#!/usr/bin/env python3
"""
Start Tone in-process, wait for /health, then report /health/remote.

Exit codes: 0 healthy, 1 missing configuration, 2 server never answered,
3 Supabase unreachable (only with --strict).
"""
import sys
import threading
import time

import httpx
import uvicorn

from tone.api.main import create_app
from tone.core.config import get_settings
from tone.core.errors import ConfigurationError


def _wait_healthy(base_url: str, timeout: float) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            if httpx.get(f"{base_url}/health", timeout=1.0).status_code == 200:
                return True
        except httpx.TransportError:
            pass
        time.sleep(0.25)
    return False


def main(argv=None) -> int:
    strict = "--strict" in (argv if argv is not None else sys.argv[1:])
    settings = get_settings()
    try:
        settings.require_remote_credentials()
    except ConfigurationError as exc:
        print(f"[verify] {exc.message}", file=sys.stderr)
        return 1

    server = uvicorn.Server(uvicorn.Config(create_app, factory=True, host="127.0.0.1", port=settings.PORT))
    threading.Thread(target=server.run, daemon=True).start()
    base_url = f"http://127.0.0.1:{settings.PORT}"
    try:
        if not _wait_healthy(base_url, timeout=15.0):
            print(f"[verify] {base_url}/health did not answer", file=sys.stderr)
            return 2
        ping = httpx.get(f"{base_url}/health/remote", timeout=10.0).json()
        print(f"[verify] health ok; supabase: {'ok' if ping['ok'] else ping['error']}")
        return 0 if ping["ok"] or not strict else 3
    finally:
        server.should_exit = True


if __name__ == "__main__":
    sys.exit(main())
