#!/usr/bin/env python
# PYTHON_ARGCOMPLETE_OK

import argparse
import logging
import os
import sys
from datetime import datetime, timedelta

import argcomplete

from pr_collector import __version__
from pr_collector.api_client import (
    DEFAULT_ENDPOINT,
    DEFAULT_MAX_PAGES,
    PaginationEngine,
    build_query_url,
    fetch_page,
)
from pr_collector.errors import (
    ApiError,
    FileOperationError,
    NetworkError,
    RecordDecodeError,
    ValidationError,
)
from pr_collector.output import ConsolePrinter, SpreadsheetWriter

# Configuration
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
ENDPOINT_ENV_VAR = "PR_COLLECTOR_ENDPOINT"


def non_negative_int(value):
    try:
        days = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not an integer")
    if days < 0:
        raise argparse.ArgumentTypeError(f"'{value}' must not be negative")
    return days


def positive_int(value):
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not an integer")
    if number < 1:
        raise argparse.ArgumentTypeError(f"'{value}' must be at least 1")
    return number


def parse_arguments(argv=None):
    """
    Parses command-line arguments for the script.
    """
    parser = argparse.ArgumentParser(
        description="Collect recent pull requests for one or more authors."
    )
    parser.add_argument(
        "-a",
        "--author",
        help="Author handle to query. Mutually exclusive with --inventory.",
    )
    parser.add_argument(
        "-s",
        "--state",
        help="Pull request state to query (e.g., 'open', 'closed', 'merged').",
    )
    parser.add_argument(
        "-d",
        "--duration",
        type=non_negative_int,
        required=True,
        help="Only include pull requests created within this many days.",
    )
    parser.add_argument(
        "-e",
        "--exc",
        action="store_true",
        help="Save the results to an Excel workbook named after the author instead of printing them.",
    )
    parser.add_argument(
        "-i",
        "--inventory",
        metavar="FILE",
        help="File with one author handle per line to query in batch. Mutually exclusive with --author.",
    )
    parser.add_argument(
        "--per-author",
        action="store_true",
        help="With --exc, write one workbook per author instead of one for the whole run.",
    )
    parser.add_argument(
        "--endpoint",
        default=os.getenv(ENDPOINT_ENV_VAR, DEFAULT_ENDPOINT),
        help=f"Pulls API endpoint. Can also be set via {ENDPOINT_ENV_VAR} environment variable. Default is '{DEFAULT_ENDPOINT}'.",
    )
    parser.add_argument(
        "--max-pages",
        type=positive_int,
        default=DEFAULT_MAX_PAGES,
        help=f"Maximum number of pages to scan per author. Default is {DEFAULT_MAX_PAGES}.",
    )
    parser.add_argument(
        "--output-dir",
        default=".",
        help="Directory the Excel workbook is written to. Default is the current directory.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    # Enable tab completion
    argcomplete.autocomplete(parser)
    return parser.parse_args(argv)


def configure_logging(debug):
    """
    Configures logging for the script.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr)  # Log to stderr
        ],
    )


def validate_arguments(args):
    """
    Checks the option combinations argparse cannot express on its own.
    """
    if bool(args.author) == bool(args.inventory):
        raise ValidationError(
            "Exactly one of --author and --inventory must be specified."
        )
    if not args.state:
        raise ValidationError("--state must be specified.")


def compute_cutoff(days, now=None):
    """
    Returns the timestamp `days` days before `now` (local time) in
    TIMESTAMP_FORMAT. Records created before it are left out.
    """
    if now is None:
        now = datetime.now()
    try:
        cutoff = now - timedelta(days=days)
    except OverflowError:
        raise ValidationError(
            f"Duration overflow: {days} days cannot be represented."
        )
    return cutoff.strftime(TIMESTAMP_FORMAT)


def read_inventory(path):
    """
    Reads author handles from a file, one per line, in file order.
    """
    try:
        with open(path, encoding="utf-8") as f:
            return f.read().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise FileOperationError(f"Failed to read inventory file {path}. {e}")


def collect_pull_requests(args, fetch=fetch_page):
    """
    Scans every requested author in order and hands the accepted pull
    requests to the selected output.

    Returns:
        The list of workbook paths written (empty in console mode).
    """
    if args.inventory:
        authors = read_inventory(args.inventory)
    else:
        authors = [args.author]

    cutoff = compute_cutoff(args.duration)
    logging.debug(f"Including pull requests created at or after {cutoff}")

    engine = PaginationEngine(fetch=fetch, max_pages=args.max_pages)
    sink = SpreadsheetWriter(args.output_dir) if args.exc else ConsolePrinter()
    written = []

    # Reject malformed queries before the first request
    urls = [
        build_query_url(args.endpoint, author, args.state) for author in authors
    ]

    for author, url in zip(authors, urls):
        if args.exc:
            print("Please wait....")

        accepted = 0

        def on_record(record):
            nonlocal accepted
            accepted += 1
            sink.accept(record)

        reason = engine.scan(url, cutoff, on_record)
        logging.info(
            f"Collected {accepted} pull requests for {author} ({reason.value})"
        )

        if args.exc and args.per_author:
            path = sink.finish()
            if path:
                written.append(path)

    if not (args.exc and args.per_author):
        path = sink.finish()
        if path:
            written.append(path)

    return written


def main(argv=None):
    """
    Main function to collect pull requests for the requested authors.
    """
    args = parse_arguments(argv)

    configure_logging(args.debug)

    try:
        validate_arguments(args)
        collect_pull_requests(args)
    except ValidationError as e:
        print(f"ERROR: Input validation failed. {e}", file=sys.stderr)
        sys.exit(1)
    except RecordDecodeError as e:
        print(f"ERROR: Unexpected pull request data. {e}", file=sys.stderr)
        sys.exit(1)
    except ApiError as e:
        print(f"ERROR: Pulls API error. {e}", file=sys.stderr)
        if args.debug and e.status_code is not None:
            print(f"Status Code: {e.status_code}", file=sys.stderr)
            print(f"Response: {e.response_text}", file=sys.stderr)
        sys.exit(1)
    except NetworkError as e:
        print(f"ERROR: Network error. {e}", file=sys.stderr)
        sys.exit(1)
    except FileOperationError as e:
        print(f"ERROR: File operation failed. {e}", file=sys.stderr)
        sys.exit(1)
    except BrokenPipeError:
        # Output piped to a command that exited early
        sys.exit(0)


if __name__ == "__main__":  # pragma: no cover
    try:
        main()
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        sys.exit(130)  # Standard exit code for SIGINT
    except Exception as e:
        print(f"ERROR: An unexpected error occurred. {e}", file=sys.stderr)
        print("If this error persists, please report it as a bug.", file=sys.stderr)
        import traceback

        traceback.print_exc()
        sys.exit(1)
