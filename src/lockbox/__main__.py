# Main Entry Point
#
# Starts the local vault API server. Settings come from LOCKBOX_* environment
# variables (or a .env file); command-line flags override them.

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from . import __version__
from .core import EventSeverity, EventType, get_audit_logger, get_settings, set_settings
from .vault import StorageFailure


def main():
    """Main entry point for Lockbox."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Lockbox - local single-user credential vault",
    )
    parser.add_argument(
        "--host",
        default=settings.host,
        help=f"API host (default: {settings.host})"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help=f"API port (default: {settings.port})"
    )
    parser.add_argument(
        "--db-path",
        type=Path,
        default=settings.db_path,
        help=f"Vault database file (default: {settings.db_path})"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Lockbox v{__version__}"
    )

    args = parser.parse_args()
    set_settings(replace(settings, host=args.host, port=args.port, db_path=args.db_path))

    get_audit_logger().log_event(
        event_type=EventType.SYSTEM_START,
        severity=EventSeverity.INFO,
        message="Lockbox starting",
        details={"version": __version__, "db_path": str(args.db_path)}
    )

    from .api.main import start_api_server

    print(f"  Starting Lockbox API on {args.host}:{args.port}...")
    print("  Press Ctrl+C to stop")

    try:
        start_api_server(host=args.host, port=args.port)
    except KeyboardInterrupt:
        print("\n\nShutting down...")
        get_audit_logger().log_event(
            event_type=EventType.SYSTEM_STOP,
            severity=EventSeverity.INFO,
            message="Lockbox stopped (user interrupt)"
        )
    except StorageFailure as e:
        print(f"\n\nError: {e}")
        get_audit_logger().log_event(
            event_type=EventType.SYSTEM_STOP,
            severity=EventSeverity.CRITICAL,
            message=f"Lockbox could not open its vault: {e}"
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
