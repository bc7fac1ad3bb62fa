#!/usr/bin/env python3

"""Publish a blog post, or manage posts and subscriptions, on a blogdesk server."""

import argparse
import sys
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from common.base.logging_config import configure_logging, get_logger
from blogdesk.client import DEFAULT_TIMEOUT, BlogClient, ClientError

logger = get_logger(__name__)

LOG_FILENAME = 'publish_post.log'

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Publish to a blogdesk server.')
    parser.add_argument('--server', default='http://localhost:5000',
                       help='Server base URL (default: http://localhost:5000)')
    parser.add_argument('--timeout', type=float, default=DEFAULT_TIMEOUT,
                       help=f'Request timeout in seconds (default: {DEFAULT_TIMEOUT})')
    parser.add_argument('--log-level', default='WARNING',
                       choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                       help='Client log level (default: WARNING)')

    subparsers = parser.add_subparsers(dest='command', required=True)

    publish = subparsers.add_parser('publish', help='Publish a new post')
    publish.add_argument('--title', required=True)
    publish.add_argument('--image', required=True, help='Path to the cover image')
    body = publish.add_mutually_exclusive_group(required=True)
    body.add_argument('--description', help='Post body')
    body.add_argument('--description-file', help='Read the post body from a file')
    publish.add_argument('--category', help='Startup, Technology, Lifestyle or General')
    publish.add_argument('--author')
    publish.add_argument('--author-img')
    publish.add_argument('--no-normalize', action='store_true',
                        help='Upload the image as-is instead of resizing it first')

    listing = subparsers.add_parser('list', help='List posts')
    listing.add_argument('--category')

    delete = subparsers.add_parser('delete', help='Delete a post')
    delete.add_argument('id')

    subscribe = subparsers.add_parser('subscribe', help='Subscribe an email address')
    subscribe.add_argument('email')

    subparsers.add_parser('subscriptions', help='List subscriptions')

    return parser.parse_args(argv)

def main(argv=None):
    args = parse_args(argv)
    # Compression and retry warnings from the client go to the terminal
    configure_logging(log_level=args.log_level, app_log_level=args.log_level, log_filename=LOG_FILENAME)
    logger.debug(f"Running {args.command} against {args.server}")
    client = BlogClient(
        args.server,
        timeout=args.timeout,
        normalize=not getattr(args, 'no_normalize', False)
    )

    try:
        if args.command == 'publish':
            description = args.description
            if args.description_file:
                description = Path(args.description_file).read_text(encoding='utf-8')
            blog = client.publish(
                title=args.title,
                description=description,
                image_path=args.image,
                category=args.category,
                author=args.author,
                author_img=args.author_img
            )
            print(f"Published {blog['id']}: {blog['title']} ({blog['category']})")
        elif args.command == 'list':
            for blog in client.list_blogs(args.category):
                print(f"{blog['id']}  {blog['date'][:10]}  [{blog['category']}]  {blog['title']}")
        elif args.command == 'delete':
            print(client.delete_blog(args.id))
        elif args.command == 'subscribe':
            print(client.subscribe(args.email))
        elif args.command == 'subscriptions':
            for item in client.list_subscriptions():
                print(f"{item['id']}  {item['date'][:10]}  {item['email']}")
    except ClientError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        if e.retryable:
            print("The request can be retried.", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0

if __name__ == '__main__':
    sys.exit(main())
