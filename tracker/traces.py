from typing import List, Optional, Sequence

from .models import TraceEvent

# Action-code prefixes for the trace categories shown in the report
PICKUP_PREFIX = "1"
DISPATCH_PREFIX = "202"
DELIVERY_PREFIX = "3"
PROBLEM_PREFIX = "4"


def select_by_prefix(
    events: Sequence[TraceEvent],
    prefix: str,
    first_match: bool
) -> Optional[TraceEvent]:
    """
    Pick one trace event whose action code starts with `prefix`.

    Events are scanned in the order the API returned them; they are not
    re-sorted by time.

    Args:
        events: Trace events of one shipment
        prefix: Action-code prefix, e.g. "1" for pickup
        first_match: True stops at the first matching event, False scans the
            whole list and keeps the last one

    Returns:
        The selected event, or None if nothing matches
    """
    selected = None

    for event in events:
        if event.action.startswith(prefix):
            selected = event
            if first_match:
                break

    return selected


def most_recent(events: Sequence[TraceEvent]) -> Optional[TraceEvent]:
    """Last event of the list; assumes the API sends them oldest first."""
    if not events:
        return None
    return events[-1]


def trace_cells(event: Optional[TraceEvent]) -> List[str]:
    """Report triple (time, station, location); blanks when there is no event."""
    if event is None:
        return ["", "", ""]
    return [event.time, event.station, event.location]
