"""
ytm-proxy CLI - Entry point

Runs the HTTP proxy (``serve``) and manages the configuration file
(``config path|init|show``).
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from ytm_proxy import __version__
from ytm_proxy.core.config import (
    create_default_config,
    get_config_path,
    load_config,
    write_default_config,
)
from ytm_proxy.core.output import setup_from_config


def run_server(
    host: Optional[str] = None,
    port: Optional[int] = None,
    reload: bool = False,
    config_path: Optional[Path] = None,
) -> int:
    """Start uvicorn with the FastAPI app.

    Returns:
        Exit code (0 for clean shutdown)
    """
    import uvicorn
    from loguru import logger

    config = load_config(config_path)
    setup_from_config(config.logging)

    host = host or config.server.host
    port = port or config.server.port
    logger.info(f"Starting ytm-proxy {__version__} on {host}:{port}")

    uvicorn.run(
        "web.backend.main:app",
        host=host,
        port=port,
        reload=reload,
        log_config=None,  # Logging already routed through loguru
    )
    return 0


def run_config_command(action: str, config_path: Optional[Path] = None) -> int:
    path = config_path or get_config_path()

    if action == "path":
        print(path)
        return 0

    if action == "init":
        if path.exists():
            print(f"Config already exists: {path}")
            return 1
        write_default_config(path)
        print(f"Created config: {path}")
        return 0

    if action == "show":
        if path.exists():
            print(path.read_text(encoding="utf-8"))
        else:
            print(f"# No config at {path}; defaults in effect\n")
            print(create_default_config())
        return 0

    print(f"Unknown config action: {action}", file=sys.stderr)
    return 2


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the ytm-proxy command."""
    parser = argparse.ArgumentParser(
        description="ytm-proxy - YouTube Music proxy with a server-side player",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"ytm-proxy {__version__}")
    parser.add_argument("--config", type=Path, help="Path to config.toml")

    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP proxy")
    serve_parser.add_argument("--host", help="Bind address (default: from config)")
    serve_parser.add_argument("--port", type=int, help="Bind port (default: from config)")
    serve_parser.add_argument(
        "--reload", action="store_true", help="Reload on code changes (development)"
    )

    config_parser = subparsers.add_parser("config", help="Manage the configuration file")
    config_parser.add_argument(
        "action", choices=["path", "init", "show"], help="Print path, write template, or show"
    )

    args = parser.parse_args(argv)

    if args.subcommand == "config":
        sys.exit(run_config_command(args.action, args.config))

    # serve is the default command
    sys.exit(
        run_server(
            host=getattr(args, "host", None),
            port=getattr(args, "port", None),
            reload=getattr(args, "reload", False),
            config_path=args.config,
        )
    )


if __name__ == "__main__":
    main()
