"""
http_client.py - HTTP Client for the Tracking API
==================================================
This module handles all HTTP communication with the courier-tracking API:
- Building the per-shipment request payload
- Signing it with the configured API key
- Posting it as a URL-encoded form and decoding the JSON answer
- Spacing calls out according to the configured per-minute limit

Request Format:
---------------
    POST <KDNIAO_API_URL>
    Content-Type: application/x-www-form-urlencoded;charset=utf-8

    RequestData = {"OrderCode":"","ShipperCode":"JD","LogisticCode":"JD0001"}
    EBusinessID = <KDNIAO_EBUSINESS_ID>
    RequestType = 8001
    DataSign    = base64(md5_hex(RequestData + KDNIAO_API_KEY))
    DataType    = 2

There is no automatic retry: a failed shipment is skipped and can be queried
again later with `--retry`.
"""

import base64
import hashlib
import json
import logging
import time

import requests

from .config import Settings
from .models import ShipmentResult, decode_result


logger = logging.getLogger(__name__)

# Real-time query request type
REQUEST_TYPE = "8001"

# 2 = JSON response
DATA_TYPE = "2"

USER_AGENT = "kdniao_api_client_bath_query_001"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded;charset=utf-8"


# =============================================================================
# PAYLOAD AND SIGNATURE
# =============================================================================

def build_request_data(courier_code: str, tracking_number: str) -> str:
    """
    Serialize the per-shipment payload exactly as it is signed and sent.

    Example:
        build_request_data("JD", "JD0001")
        -> '{"OrderCode":"","ShipperCode":"JD","LogisticCode":"JD0001"}'
    """
    data = {
        "OrderCode": "",
        "ShipperCode": courier_code,
        "LogisticCode": tracking_number,
    }
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def make_sign(data: str, key: str) -> str:
    """Base64 of the lowercase hex MD5 digest of `data` followed by `key`."""
    digest = hashlib.md5((data + key).encode("utf-8")).hexdigest()
    return base64.b64encode(digest.encode("ascii")).decode("ascii")


def build_form(settings: Settings, courier_code: str, tracking_number: str) -> dict:
    request_data = build_request_data(courier_code, tracking_number)
    return {
        "RequestData": request_data,
        "EBusinessID": settings.ebusiness_id,
        "RequestType": REQUEST_TYPE,
        "DataSign": make_sign(request_data, settings.api_key),
        "DataType": DATA_TYPE,
    }


# =============================================================================
# HTTP CLIENT CLASS
# =============================================================================

class HttpClient:
    """
    HTTP client for the courier-tracking API.

    Usage:
        client = HttpClient(settings)
        result = client.query("JD", "JD0001234567")   # ShipmentResult or None
        client.close()
    """

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        """
        Initialize the HTTP client.

        Args:
            settings: Configuration holding credentials, URL, timeout and rate limit
            session: Optional pre-built session (tests pass a mock here)
        """
        self.settings = settings

        self.s = session if session is not None else requests.Session()
        self.s.headers.update({
            "Content-Type": FORM_CONTENT_TYPE,
            "User-Agent": USER_AGENT,
        })

        self.url = settings.api_url
        self.timeout = settings.timeout_sec

        # Minimum seconds between two requests, 0 = no throttling
        self.min_interval = 60.0 / settings.rate_limit if settings.rate_limit > 0 else 0.0
        self._last_request_at: float | None = None

    # -------------------------------------------------------------------------
    # RATE LIMITING
    # -------------------------------------------------------------------------

    def _throttle(self):
        """Sleep until at least `min_interval` has passed since the last call."""
        if self.min_interval and self._last_request_at is not None:
            elapsed = time.monotonic() - self._last_request_at
            wait_time = self.min_interval - elapsed
            if wait_time > 0:
                logger.debug(f"Rate limit: waiting {wait_time:.2f}s")
                time.sleep(wait_time)

        self._last_request_at = time.monotonic()

    # -------------------------------------------------------------------------
    # API REQUEST METHODS
    # -------------------------------------------------------------------------

    def query(self, courier_code: str, tracking_number: str) -> ShipmentResult | None:
        """
        Query the tracking state of one shipment.

        Args:
            courier_code: API courier code (e.g. "JD")
            tracking_number: The shipment's tracking number

        Returns:
            The decoded ShipmentResult, or None when the request failed at the
            network level, returned a non-200 status, was not JSON, or the API
            answered with Success=false.

        Raises:
            ResponseFormatError: If the API reported success but the payload
                is missing required fields
        """
        form = build_form(self.settings, courier_code, tracking_number)

        self._throttle()

        try:
            r = self.s.post(self.url, data=form, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(
                f"Network error for {courier_code} {tracking_number}: "
                f"{type(e).__name__}: {e}"
            )
            return None

        if r.status_code != 200:
            logger.warning(
                f"HTTP {r.status_code} for {courier_code} {tracking_number}: "
                f"{(r.text or '')[:200].strip()}"
            )
            return None

        try:
            payload = r.json()
        except ValueError as e:
            logger.warning(
                f"Invalid JSON response for {courier_code} {tracking_number}: {str(e)[:80]}"
            )
            return None

        logger.debug(f"Response for {courier_code} {tracking_number}: {payload}")

        success = payload.get("Success") if isinstance(payload, dict) else None
        if success is not True:
            reason = payload.get("Reason", "") if isinstance(payload, dict) else ""
            logger.warning(
                f"API reported failure for {courier_code} {tracking_number}: "
                f"{reason or payload}"
            )
            return None

        return decode_result(payload)

    # -------------------------------------------------------------------------
    # CLEANUP METHODS
    # -------------------------------------------------------------------------

    def close(self):
        """Close the HTTP session and release resources."""
        self.s.close()
