"""
models.py - Shipment and Report Data Types
===========================================
Plain dataclasses shared by the loader, the API client, the classifier and
the report writer.

Input side:
    ShipmentRequest  : one row of the input sheet
API side:
    TraceEvent       : one entry of a shipment's event history
    ShipmentResult   : decoded tracking response for one shipment
Report side:
    HeaderRow / DataRow / SummaryRow : the three kinds of output rows
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


class ResponseFormatError(ValueError):
    """The tracking API reported success but the payload has the wrong shape."""


# =============================================================================
# INPUT / API TYPES
# =============================================================================

@dataclass(frozen=True)
class ShipmentRequest:
    """One shipment to query, as read from the input sheet."""

    # Raw value of column A: a courier code ("JD") or a name, see config
    courier: str

    tracking_number: str

    # Column C was non-blank: include this row in a `--retry` run
    is_retry: bool = False

    # 1-based sheet row, only used in log messages
    input_row: Optional[int] = None


@dataclass(frozen=True)
class TraceEvent:
    action: str = ""
    station: str = ""
    time: str = ""
    location: str = ""


@dataclass
class ShipmentResult:
    state: str
    state_ex: str = ""
    location: str = ""
    traces: List[TraceEvent] = field(default_factory=list)


# =============================================================================
# REPORT ROWS
# =============================================================================

@dataclass(frozen=True)
class HeaderRow:
    titles: tuple

    def cells(self) -> List[str]:
        return list(self.titles)


@dataclass(frozen=True)
class DataRow:
    values: tuple

    def cells(self) -> List[str]:
        return list(self.values)


@dataclass(frozen=True)
class SummaryRow:
    """Audit footer holding the wall-clock start and end of a batch run."""

    started_at: str
    finished_at: str

    def cells(self) -> List[str]:
        return [f"Start time {self.started_at}", f"End time {self.finished_at}"]


ReportRow = Union[HeaderRow, DataRow, SummaryRow]


# =============================================================================
# RESPONSE DECODING
# =============================================================================

def _text(value: Any) -> str:
    """Coerce an optional JSON scalar to a string ("" for null/missing)."""
    if value is None:
        return ""
    return str(value)


def _decode_trace(item: Any) -> TraceEvent:
    if not isinstance(item, dict):
        raise ResponseFormatError(f"Trace entry is not an object: {item!r}")
    return TraceEvent(
        action=_text(item.get("Action")),
        station=_text(item.get("AcceptStation")),
        time=_text(item.get("AcceptTime")),
        location=_text(item.get("Location")),
    )


def decode_result(payload: Dict[str, Any]) -> ShipmentResult:
    """
    Decode a successful tracking response into a ShipmentResult.

    Only "State" is mandatory. "StateEx", "Location" and "Traces" may be
    absent or null. Codes sent as JSON numbers are turned into strings.

    Raises:
        ResponseFormatError: If the payload is not an object, "State" is
            missing, or "Traces" is not a list of objects
    """
    if not isinstance(payload, dict):
        raise ResponseFormatError(f"Response is not a JSON object: {type(payload).__name__}")

    if payload.get("State") is None:
        raise ResponseFormatError(
            f"Response has no State field. Keys: {sorted(payload.keys())}"
        )

    raw_traces = payload.get("Traces")
    if raw_traces is None:
        raw_traces = []
    if not isinstance(raw_traces, list):
        raise ResponseFormatError(f"Traces is not a list: {type(raw_traces).__name__}")

    return ShipmentResult(
        state=_text(payload.get("State")).strip(),
        state_ex=_text(payload.get("StateEx")).strip(),
        location=_text(payload.get("Location")),
        traces=[_decode_trace(item) for item in raw_traces],
    )
