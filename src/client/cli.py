"""
Command-line entry point for analyzing a leaf image against a running server
"""

import argparse
import os
import sys

from src.client.api_client import AnalysisRequestError, KawogoClient, format_result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='kawogo-analyze',
        description='Send a cassava leaf photo to Kawogo Care and print the diagnosis.'
    )
    parser.add_argument('image', help='Path to the leaf image')
    parser.add_argument(
        '--url',
        default=os.getenv('KAWOGO_URL', f"http://localhost:{os.getenv('PORT', '5000')}"),
        help='Server base URL (default: $KAWOGO_URL or http://localhost:$PORT)'
    )
    parser.add_argument('--timeout', type=float, default=60, help='Request timeout in seconds')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if not os.path.isfile(args.image):
        print(f"Error: file not found: {args.image}", file=sys.stderr)
        return 2

    client = KawogoClient(args.url, timeout=args.timeout)

    try:
        result = client.analyze(args.image)
    except AnalysisRequestError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    print(format_result(result))
    return 0


if __name__ == '__main__':
    sys.exit(main())
