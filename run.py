#!/usr/bin/env python3
"""
Launcher for the video studio service.

    python run.py                      # settings from .env, auto reload on
    python run.py --no-reload --port 9000
"""
import argparse
import sys

import uvicorn
from dotenv import load_dotenv

LOG_LEVELS = ["critical", "error", "warning", "info", "debug", "trace"]


def parse_args(argv=None, defaults=None) -> argparse.Namespace:
    defaults = defaults or {}
    parser = argparse.ArgumentParser(description="Run the video studio API")
    parser.add_argument("--host", default=defaults.get("host", "127.0.0.1"), help="bind address")
    parser.add_argument("--port", type=int, default=defaults.get("port", 8000), help="bind port")
    parser.add_argument("--no-reload", action="store_true", help="disable auto reload")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=defaults.get("log_level", "info").lower(),
        help="uvicorn log level",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    load_dotenv()
    # Settings are read only after .env is loaded
    from studio.config import settings

    args = parse_args(argv, {"host": settings.host, "port": settings.port, "log_level": settings.log_level})

    print(f"{settings.app_name} {settings.app_version} ({settings.environment.value})")
    print(f"  listening   http://{args.host}:{args.port}  (docs at /docs)")
    print(f"  backend     {settings.api_base_url or 'not configured'}")
    print(f"  supabase    {'configured' if settings.supabase_configured else 'not configured'}")

    try:
        uvicorn.run(
            "studio.main:app",
            host=args.host,
            port=args.port,
            reload=not args.no_reload,
            log_level=args.log_level,
        )
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    sys.exit(main())
