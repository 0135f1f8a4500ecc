"""Writes the annotated report back over the input workbook."""

import logging
from pathlib import Path
from typing import List

import pandas as pd

from .models import ReportRow


logger = logging.getLogger(__name__)


def report_frame(rows: List[ReportRow]) -> pd.DataFrame:
    """
    Flatten report rows into a DataFrame of strings.

    Shorter rows (the summary footer) are padded with blanks so the frame is
    rectangular.
    """
    table = [row.cells() for row in rows]
    df = pd.DataFrame(table, dtype=object)
    return df.fillna("")


def write_report(path: str | Path, rows: List[ReportRow], sheet_name: str = "Sheet1"):
    """Overwrite `path` with a single-sheet workbook holding `rows`."""
    if not rows:
        logger.warning("No rows to write")
        return

    output_path = Path(path)
    report_frame(rows).to_excel(
        output_path,
        sheet_name=sheet_name,
        header=False,
        index=False,
        engine="openpyxl",
    )

    logger.info(f"Report written to {output_path.resolve()}")
