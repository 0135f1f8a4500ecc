"""
loader.py - Input Sheet Loader
===============================
This module reads the list of shipments to query from an Excel workbook.

Sheet Layout:
-------------
    Row 1       : header, never queried (e.g. "Courier | Tracking number | Retry")
    Rows 2..N-1 : one shipment per row
    Row N       : trailing sentinel row, must exist, never queried

Columns (by position, header text is ignored):
    A : courier code or courier name (see KDNIAO_COURIER_INPUT)
    B : tracking number
    C : retry flag, any non-blank value marks the row for a `--retry` run

The same layout is what the report writer produces, so a report can be fed
back in as input.
"""

import logging
from pathlib import Path
from typing import List

import pandas as pd

from .models import ShipmentRequest


logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = ('.xlsx',)

# Number of leading columns the loader reads
INPUT_COLUMNS = 3


class SheetNotFoundError(ValueError):
    """The workbook has no sheet with the configured name."""


def _cell(value) -> str:
    """Normalize a cell read with dtype=str (NaN-free) to a stripped string."""
    if value is None:
        return ""
    return str(value).strip()


def load_shipments(filepath: str, sheet_name: str = "Sheet1") -> List[ShipmentRequest]:
    """
    Load the shipments to query from an Excel workbook.

    Args:
        filepath: Path to the input workbook (.xlsx)
        sheet_name: Name of the sheet holding the shipment list

    Returns:
        One ShipmentRequest per interior row, in sheet order.

    Raises:
        FileNotFoundError: If the input file doesn't exist
        ValueError: If the file type is unsupported
        SheetNotFoundError: If the workbook has no sheet called `sheet_name`
    """
    # -------------------------------------------------------------------------
    # STEP 1: Validate the file
    # -------------------------------------------------------------------------
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Shipment list file not found: {filepath}")

    if path.suffix.lower() not in EXCEL_SUFFIXES:
        raise ValueError(
            f"Unsupported file type: {path.suffix}. "
            f"Only {', '.join(EXCEL_SUFFIXES)} files are supported."
        )

    # -------------------------------------------------------------------------
    # STEP 2: Read the named sheet
    # -------------------------------------------------------------------------
    # header=None keeps the header row as data so that the positional
    # first/last skip below applies to the raw sheet. dtype=str plus
    # keep_default_na=False keeps tracking numbers as text and blanks as "".
    with pd.ExcelFile(path, engine="openpyxl") as workbook:
        if sheet_name not in workbook.sheet_names:
            raise SheetNotFoundError(
                f"Sheet {sheet_name!r} not found in {filepath}. "
                f"Available sheets: {workbook.sheet_names}"
            )
        df = pd.read_excel(
            workbook,
            sheet_name=sheet_name,
            header=None,
            dtype=str,
            keep_default_na=False,
        )

    # Sheets with fewer than three used columns still yield A/B/C
    df = df.reindex(columns=range(max(INPUT_COLUMNS, df.shape[1])), fill_value="")

    # -------------------------------------------------------------------------
    # STEP 3: Skip header and trailing row, build requests
    # -------------------------------------------------------------------------
    shipments = []
    count = len(df)

    for index, row in enumerate(df.itertuples(index=False, name=None)):
        if index == 0 or index == count - 1:
            continue

        courier = _cell(row[0])
        tracking_number = _cell(row[1])

        if not courier and not tracking_number:
            logger.debug(f"Row {index + 1} is blank, skipped")
            continue

        shipments.append(ShipmentRequest(
            courier=courier,
            tracking_number=tracking_number,
            is_retry=bool(_cell(row[2])),
            input_row=index + 1,
        ))

    logger.info(f"Shipment list contains {len(shipments)} rows")
    return shipments


def select_retry_rows(requests: List[ShipmentRequest]) -> List[ShipmentRequest]:
    """Keep only rows flagged for retry; the flag is cleared on the copies."""
    return [
        ShipmentRequest(
            courier=r.courier,
            tracking_number=r.tracking_number,
            is_retry=False,
            input_row=r.input_row,
        )
        for r in requests
        if r.is_retry
    ]
