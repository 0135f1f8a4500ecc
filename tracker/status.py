"""Human-readable labels for the courier state codes returned by the tracking API."""

# Primary "State" values are single digits; "StateEx" refines them with
# three-digit codes. Both fields are looked up in the same table.
STATUS_LABELS = {
    "0": "no tracking information",
    "1": "picked up",
    "2": "in transit",
    "201": "arrived at destination city",
    "202": "out for delivery",
    "211": "placed in parcel locker or station",
    "3": "delivered",
    "301": "delivered (normal)",
    "302": "delivered after delivery exception",
    "304": "delivered (signed by proxy)",
    "311": "collected from parcel locker or station",
    "4": "problem shipment",
    "401": "problem shipment",
    "402": "not signed in time",
    "403": "not updated in time",
    "404": "refused (returned)",
    "405": "delivery exception",
    "406": "return signed",
    "407": "return not signed",
    "412": "parcel locker or station pickup overdue",
}

UNKNOWN_PREFIX = "unknown "


def translate(code) -> str:
    """
    Map a state or extended-state code to its label.

    Examples:
        translate("3")    -> "delivered"
        translate("211")  -> "placed in parcel locker or station"
        translate("999")  -> "unknown 999"
    """
    code = "" if code is None else str(code).strip()
    return STATUS_LABELS.get(code, UNKNOWN_PREFIX + code)
