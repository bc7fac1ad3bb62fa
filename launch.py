#!/usr/bin/env python3

"""Start the blogdesk web server."""

import argparse
import datetime
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / 'src'))

import constants
from common.base.logging_config import configure_logging, get_logger
from common.config.blog_config import STORAGE_BACKENDS, init_blog_config

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

EPILOG = """
Examples:
  launch.py                          # Serve on port 5000
  launch.py --port 8080              # Serve on port 8080
  launch.py --storage inline         # Keep images inside the blog records
  launch.py --config /etc/blog.toml  # Use another configuration file
  launch.py --dev                    # CORS and error details enabled

Each run logs to logs/blogdesk_YYYYMMDD_HHMMSS_pidNNNN.log
"""

def get_log_filename() -> str:
    """One log file per process, named by start time and PID."""
    started = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"blogdesk_{started}_pid{os.getpid()}.log"

def init_system(log_level="INFO", app_log_level="DEBUG", config_path=None):
    """Production constants, logging, then the blog configuration."""
    constants.init_production()

    log_filename = get_log_filename()
    configure_logging(log_level=log_level, app_log_level=app_log_level, log_filename=log_filename)
    logger = get_logger(__name__)
    logger.info(f"Starting with PID {os.getpid()}, log file: {log_filename}")

    config = init_blog_config(config_path)
    logger.info(f"Image storage: {config.resolve_storage_backend()} ({config.upload_dir})")

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='launch.py',
        description='Launch the blogdesk web server.',
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    server = parser.add_argument_group('server')
    server.add_argument('--host', default='0.0.0.0', help='Address to bind (default: 0.0.0.0)')
    server.add_argument('--port', type=int, default=5000, help='Port to bind (default: 5000)')
    server.add_argument('--config', help='Blog configuration file (default: config/blog.toml)')
    server.add_argument('--storage', choices=STORAGE_BACKENDS,
                        help='Override the image storage backend')

    dev = parser.add_argument_group('development')
    dev.add_argument('--dev', action='store_true', help='Development mode (CORS, error details)')
    dev.add_argument('--debug', action='store_true', help='Flask debug server and DEBUG logging')

    logs = parser.add_argument_group('logging')
    logs.add_argument('--log-level', default='INFO', choices=LOG_LEVELS,
                      help='Root and library log level (default: INFO)')
    logs.add_argument('--app-log-level', default='DEBUG', choices=LOG_LEVELS,
                      help='Log level for blogdesk modules (default: DEBUG)')
    logs.add_argument('--quiet', '-q', action='store_true', help='Only log warnings and errors')

    return parser

def effective_log_level(args: argparse.Namespace) -> str:
    if args.quiet:
        return 'WARNING'
    return 'DEBUG' if args.debug else args.log_level

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # Read by constants and the blog configuration, so set before init_system
    if args.dev:
        os.environ['FLASK_ENV'] = 'development'
    if args.storage:
        os.environ['BLOG_STORAGE_BACKEND'] = args.storage

    try:
        init_system(
            log_level=effective_log_level(args),
            app_log_level=args.app_log_level,
            config_path=args.config
        )

        from blogdesk.server import run_server
        if not args.quiet:
            print(f"Starting blog server on http://{args.host}:{args.port}")
        run_server(host=args.host, port=args.port, debug=args.debug or args.dev)
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 130
    except Exception as e:
        if args.debug:
            import traceback
            traceback.print_exc()
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0

if __name__ == '__main__':
    sys.exit(main())
