#!/usr/bin/env python3
"""
Container entrypoint: run the release step, then replace this process with
gunicorn serving app.wsgi:app.

Environment: PORT (default 3000), WEB_CONCURRENCY (default 2),
GUNICORN_TIMEOUT (default 60), SKIP_RELEASE=1 to serve without migrating.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _int_env(name: str, default: int, *, low: int = 1, high: int = 65535) -> int:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        value = low - 1
    if not low <= value <= high:
        print(f"[start] invalid {name}={raw!r}; expected an integer in {low}-{high}", flush=True)
        sys.exit(1)
    return value


def gunicorn_argv() -> list[str]:
    port = _int_env("PORT", 3000)
    return [
        "gunicorn",
        "app.wsgi:app",
        "--bind", f"0.0.0.0:{port}",
        "--workers", str(_int_env("WEB_CONCURRENCY", 2, high=64)),
        "--timeout", str(_int_env("GUNICORN_TIMEOUT", 60, high=3600)),
        "--preload",
        "--access-logfile", "-",
        "--error-logfile", "-",
    ]


def main() -> None:
    argv = gunicorn_argv()

    if (os.environ.get("SKIP_RELEASE") or "").strip() != "1":
        from scripts.release import run_release

        try:
            run_release()
        except Exception as e:
            print(f"[start] release failed: {e}", flush=True)
            sys.exit(1)

    print(f"[start] exec {' '.join(argv)}", flush=True)
    # gunicorn takes over the pid so it receives container signals directly
    os.execvp(argv[0], argv)


if __name__ == "__main__":
    main()
