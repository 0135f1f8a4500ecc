"""
run_batch.py - Main Application Entry Point
============================================
This is the main script that drives a batch tracking query.

What it does:
-------------
1. Loads configuration from the .env file (writes a template on first run)
2. Reads the shipment list from the input workbook
3. For each row, queries the tracking API, one request at a time
4. Translates the status codes and picks the milestone trace events
5. Overwrites the input workbook with the annotated report

Usage:
------
    python -m tracker.run_batch -f shipments.xlsx
    python -m tracker.run_batch -f shipments.xlsx --retry
    python -m tracker.run_batch -f shipments.xlsx --dry-run

Command Line Options:
---------------------
    -f, --file    : Path to the input .xlsx workbook (required)
    -r, --retry   : Only query rows whose retry column is filled in
    --config      : Configuration file (default: ./.env)
    --dry-run     : Load and validate input without making API calls
    --debug       : Enable debug logging for troubleshooting

NOTE: the first and the last row of the sheet are never queried. Keep a
header in the first row and any placeholder text in the last one.
"""

import sys
import logging
import time
import argparse
from datetime import datetime, timezone
from typing import List

from .classifier import classify, header_row
from .config import ConfigCreatedError, Settings, load_settings, resolve_courier
from .http_client import HttpClient
from .loader import load_shipments, select_retry_rows
from .models import ReportRow, ResponseFormatError, ShipmentRequest, SummaryRow
from .report import write_report


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

LOG_LEVEL = logging.INFO

# Format of the start/end cells in the report footer, always in UTC
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %Z"

# Log a progress line every N shipments
PROGRESS_EVERY = 10

EXIT_INTERRUPTED = 130


logger = logging.getLogger(__name__)


def configure_logging(debug: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if debug else LOG_LEVEL,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S'
    )


# =============================================================================
# BATCH ORCHESTRATION
# =============================================================================

def query_row(
    client: HttpClient,
    request: ShipmentRequest,
    settings: Settings
):
    """
    Query one shipment and build its report row.

    Returns:
        The DataRow, or None when the row is skipped (unknown courier,
        failed request, malformed response). The reason is logged here.
    """
    label = f"{request.courier} {request.tracking_number}"
    if request.input_row is not None:
        label = f"row {request.input_row}: {label}"

    courier_code = resolve_courier(request.courier, settings)
    if not courier_code:
        if settings.courier_input == "name":
            logger.warning(f"Skipped, courier not found in KDNIAO_COURIER_MAP ({label})")
        else:
            logger.warning(f"Skipped, empty courier ({label})")
        return None

    if not request.tracking_number:
        logger.warning(f"Skipped, empty tracking number ({label})")
        return None

    try:
        result = client.query(courier_code, request.tracking_number)
    except ResponseFormatError as e:
        logger.warning(f"Skipped, malformed API response ({label}): {e}")
        return None

    row = classify(request, result)
    if row is None:
        logger.warning(f"Query failed for this row ({label})")
    return row


def run_batch(
    shipments: List[ShipmentRequest],
    client: HttpClient,
    settings: Settings
) -> List[ReportRow]:
    """
    Query every shipment in order and assemble the report.

    Args:
        shipments: Shipments to query
        client: Tracking API client
        settings: Loaded configuration

    Returns:
        [HeaderRow, DataRow..., SummaryRow]. Failed shipments have no row.
    """
    rows: List[ReportRow] = [header_row()]

    started_at = datetime.now(timezone.utc)
    start_time = time.monotonic()
    total = len(shipments)
    succeeded = 0

    for i, request in enumerate(shipments):
        if i > 0 and i % PROGRESS_EVERY == 0:
            elapsed = time.monotonic() - start_time
            rate = i / elapsed if elapsed > 0 else 0
            eta = (total - i) / rate if rate > 0 else 0
            logger.info(
                f"Progress: {i}/{total} "
                f"({i/total*100:.1f}%) "
                f"| ETA: {eta/60:.1f}m"
            )

        row = query_row(client, request, settings)
        if row is not None:
            rows.append(row)
            succeeded += 1

    finished_at = datetime.now(timezone.utc)
    rows.append(SummaryRow(
        started_at=started_at.strftime(TIMESTAMP_FORMAT),
        finished_at=finished_at.strftime(TIMESTAMP_FORMAT),
    ))

    logger.info("-" * 50)
    logger.info(f"Processing complete in {time.monotonic() - start_time:.1f} seconds")
    logger.info(f"Total Rows: {total}")
    logger.info(f"Succeeded: {succeeded}")
    logger.info(f"Failed: {total - succeeded}")
    logger.info("-" * 50)

    return rows


# =============================================================================
# COMMAND LINE ARGUMENT PARSING
# =============================================================================

def parse_arguments(argv=None):
    """
    Parse command-line arguments.

    Returns:
        Namespace object with the parsed arguments:
        - file: Path to the input workbook
        - retry: Boolean, only query rows flagged for retry
        - config: Configuration file path or None
        - dry_run: Boolean, if True skip API calls
        - debug: Boolean, if True enable debug logging
    """
    parser = argparse.ArgumentParser(
        description='Batch query shipment tracking states and annotate the workbook',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Input sheet layout (first and last rows are never queried):
  first row   Courier | Tracking number | Retry
  ...         one shipment per row
  last row    must exist, any content

Examples:
  python -m tracker.run_batch -f shipments.xlsx
  python -m tracker.run_batch -f shipments.xlsx --retry
        """
    )

    parser.add_argument(
        '-f', '--file',
        required=True,
        metavar='FILE',
        help='Path to the input .xlsx workbook (overwritten with the report)'
    )

    parser.add_argument(
        '-r', '--retry',
        action='store_true',
        help='Only query rows whose retry column is filled in'
    )

    parser.add_argument(
        '--config',
        default=None,
        help='Configuration file (default: ./.env)'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Load and validate input without making API calls'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args(argv)


# =============================================================================
# MAIN EXECUTION FUNCTION
# =============================================================================

def main(argv=None) -> int:
    """
    Run a batch query from the command line.

    Returns:
        Process exit code: 0 on completion (even if some rows failed),
        1 on a fatal startup error, 130 when interrupted.
    """
    args = parse_arguments(argv)
    configure_logging(args.debug)

    client = None

    try:
        # ---------------------------------------------------------------------
        # STEP 1: Load configuration
        # ---------------------------------------------------------------------
        settings = load_settings(args.config)
        logger.info(f"API URL: {settings.api_url}")
        logger.info(f"Rate limit: {settings.rate_limit or 'off'} requests/minute")
        logger.info(f"Courier column holds: {settings.courier_input}")

        # ---------------------------------------------------------------------
        # STEP 2: Load the shipment list
        # ---------------------------------------------------------------------
        logger.info(f"Loading shipments from {args.file}...")
        shipments = load_shipments(args.file, settings.sheet_name)

        if args.retry:
            shipments = select_retry_rows(shipments)
            logger.info(f"Retry mode: {len(shipments)} rows flagged for retry")

        # ---------------------------------------------------------------------
        # STEP 3: Handle dry run mode
        # ---------------------------------------------------------------------
        if args.dry_run:
            logger.info("DRY RUN MODE - No API calls will be made")
            logger.info(f"Sample row: {shipments[0] if shipments else 'No data'}")
            unresolved = [r for r in shipments if not resolve_courier(r.courier, settings)]
            if unresolved:
                logger.warning(f"{len(unresolved)} rows have an unknown courier")
            return 0

        # ---------------------------------------------------------------------
        # STEP 4: Query every shipment
        # ---------------------------------------------------------------------
        client = HttpClient(settings)
        logger.info("Starting tracking queries...")
        rows = run_batch(shipments, client, settings)

        # ---------------------------------------------------------------------
        # STEP 5: Overwrite the input workbook with the report
        # ---------------------------------------------------------------------
        write_report(args.file, rows, settings.sheet_name)
        return 0

    except KeyboardInterrupt:
        logger.warning("Interrupted by user. Input file left unchanged.")
        return EXIT_INTERRUPTED

    except ConfigCreatedError as e:
        logger.error(str(e))
        return 1

    except (RuntimeError, FileNotFoundError, ValueError) as e:
        logger.error(f"Fatal error: {e}")
        return 1

    finally:
        if client:
            client.close()


def cli():
    sys.exit(main())


# =============================================================================
# SCRIPT ENTRY POINT
# =============================================================================

if __name__ == '__main__':
    cli()
