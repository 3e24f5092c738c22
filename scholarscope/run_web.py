"""
ScholarScope Web Server Launcher
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Launcher for the ScholarScope JSON API.

Usage:
    scholarscope-web [--host HOST] [--port PORT] [--debug]

Examples:
    scholarscope-web                    # Run on localhost:5000
    scholarscope-web --port 8080        # Run on localhost:8080
    scholarscope-web --host 0.0.0.0     # Allow external connections
    scholarscope-web --debug            # Enable debug mode
"""

import argparse
import sys

from .config import WEB_SETTINGS, get_config, get_log_level
from .utils import setup_logging


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Launch the ScholarScope API server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        '--host',
        default=WEB_SETTINGS['default_host'],
        help=f"Host to bind to (default: {WEB_SETTINGS['default_host']})"
    )

    parser.add_argument(
        '--port',
        type=int,
        default=WEB_SETTINGS['default_port'],
        help=f"Port to bind to (default: {WEB_SETTINGS['default_port']})"
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        default=WEB_SETTINGS['debug_mode'],
        help='Enable debug mode'
    )

    args = parser.parse_args()
    setup_logging("DEBUG" if args.debug else get_log_level())

    from .aggregate import build_service
    from .app import create_app

    config = get_config()
    if not config.orcid_client_id or not config.orcid_client_secret:
        print("⚠️  ORCID_CLIENT_ID / ORCID_CLIENT_SECRET not set; registry calls will fail.")

    app = create_app(build_service(config))

    print("🚀 Starting ScholarScope API...")
    print(f"   📍 URL: http://{args.host}:{args.port}")
    print(f"   🔧 Debug mode: {'ON' if args.debug else 'OFF'}")
    print()

    try:
        app.run(
            host=args.host,
            port=args.port,
            debug=args.debug
        )
    except KeyboardInterrupt:
        print("\n👋 Server stopped by user")
        sys.exit(0)


if __name__ == '__main__':
    main()
