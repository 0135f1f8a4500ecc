import pytest
import pandas as pd
from unittest.mock import Mock

from tracker.config import Settings
from tracker.models import TraceEvent


@pytest.fixture
def settings():
    """Settings with throttling off so tests never sleep."""
    return Settings(
        ebusiness_id="1234567",
        api_key="test-key",
        api_url="https://api.example.com/Ebusiness/EbusinessOrderHandle.aspx",
        rate_limit=0,
        timeout_sec=5,
    )


@pytest.fixture
def sample_traces():
    """Trace history of a parcel delivered after one failed attempt."""
    return [
        TraceEvent(action="1", station="Picked up in Shenzhen", time="2024-05-01 09:00:00", location="Shenzhen"),
        TraceEvent(action="2", station="Departed Shenzhen hub", time="2024-05-01 21:00:00", location="Shenzhen"),
        TraceEvent(action="201", station="Arrived in Beijing", time="2024-05-02 18:00:00", location="Beijing"),
        TraceEvent(action="202", station="Out for delivery", time="2024-05-03 08:00:00", location="Beijing"),
        TraceEvent(action="405", station="Recipient unreachable", time="2024-05-03 12:00:00", location="Beijing"),
        TraceEvent(action="202", station="Out for delivery again", time="2024-05-04 08:00:00", location="Beijing"),
        TraceEvent(action="301", station="Signed by recipient", time="2024-05-04 10:30:00", location="Beijing"),
    ]


def api_payload(**overrides):
    """Successful tracking response as the API sends it."""
    payload = {
        "EBusinessID": "1234567",
        "ShipperCode": "JD",
        "LogisticCode": "JD0001",
        "Success": True,
        "State": "3",
        "StateEx": "301",
        "Location": "Beijing",
        "Traces": [
            {"Action": "1", "AcceptStation": "A", "AcceptTime": "t1", "Location": "L1"},
            {"Action": "301", "AcceptStation": "B", "AcceptTime": "t2", "Location": "L2"},
        ],
    }
    payload.update(overrides)
    return payload


def mock_response(status_code=200, payload=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.text = text
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def mock_session():
    """Session whose post() returns a successful tracking response."""
    session = Mock()
    session.headers = {}
    session.post.return_value = mock_response(payload=api_payload())
    return session


def write_sheet(path, rows, sheet_name="Sheet1"):
    """Write `rows` (lists of cells) as a header-less sheet."""
    pd.DataFrame(rows).to_excel(path, sheet_name=sheet_name, header=False, index=False)
    return path
