"""
classifier.py - Report Row Builder
===================================
Turns one ShipmentRequest plus its decoded ShipmentResult into a fixed-width
DataRow. Downstream spreadsheets rely on the column order below, so every
row has exactly len(HEADER_CELLS) cells; trace categories with no matching
event are written as blank triples.

Column layout:
--------------
    courier | tracking no. | executed | ===
    status | extended status | location
    === | latest time | latest station | latest location
    === | pickup (t/s/l) | dispatch (t/s/l) | delivery (t/s/l)
    === | problem (t/s/l)
"""

from typing import Optional

from .models import DataRow, HeaderRow, ShipmentRequest, ShipmentResult
from .status import translate
from .traces import (
    DELIVERY_PREFIX,
    DISPATCH_PREFIX,
    PICKUP_PREFIX,
    PROBLEM_PREFIX,
    most_recent,
    select_by_prefix,
    trace_cells,
)

SEPARATOR = "==="

# Written in the "executed" column of every successfully queried row
EXECUTED = "1"


def _triple_titles(name: str):
    return (f"{name} time", f"{name} station", f"{name} location")


HEADER_CELLS = (
    "Courier",
    "Tracking number",
    "Executed",
    SEPARATOR,
    "Status",
    "Extended status",
    "City",
    SEPARATOR,
    *_triple_titles("Latest"),
    SEPARATOR,
    *_triple_titles("Pickup"),
    *_triple_titles("Dispatch"),
    *_triple_titles("Delivery"),
    SEPARATOR,
    *_triple_titles("Problem"),
)


def header_row() -> HeaderRow:
    return HeaderRow(HEADER_CELLS)


def classify(
    request: ShipmentRequest,
    result: Optional[ShipmentResult]
) -> Optional[DataRow]:
    """
    Build the report row for one shipment.

    Args:
        request: The input row that was queried
        result: Decoded API result, or None when the query failed

    Returns:
        A DataRow with len(HEADER_CELLS) cells, or None if `result` is None
        (the caller logs the failure and moves on)
    """
    if result is None:
        return None

    traces = result.traces

    cells = [request.courier, request.tracking_number, EXECUTED, SEPARATOR]

    # Status block
    cells.append(translate(result.state))
    cells.append(translate(result.state_ex))
    cells.append(result.location or "")

    # Latest event, whatever its category
    cells.append(SEPARATOR)
    cells.extend(trace_cells(most_recent(traces)))

    # Milestones: first pickup, last dispatch, last delivery
    cells.append(SEPARATOR)
    cells.extend(trace_cells(select_by_prefix(traces, PICKUP_PREFIX, first_match=True)))
    cells.extend(trace_cells(select_by_prefix(traces, DISPATCH_PREFIX, first_match=False)))
    cells.extend(trace_cells(select_by_prefix(traces, DELIVERY_PREFIX, first_match=False)))

    # Most recent problem event
    cells.append(SEPARATOR)
    cells.extend(trace_cells(select_by_prefix(traces, PROBLEM_PREFIX, first_match=False)))

    return DataRow(tuple(cells))
