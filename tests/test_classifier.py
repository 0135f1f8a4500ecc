from tracker.classifier import EXECUTED, HEADER_CELLS, SEPARATOR, classify, header_row
from tracker.models import DataRow, ShipmentRequest, ShipmentResult, TraceEvent

REQUEST = ShipmentRequest(courier="JD", tracking_number="JD0001")

# Column positions in the report
STATUS, STATUS_EX, CITY = 4, 5, 6
LATEST = slice(8, 11)
PICKUP = slice(12, 15)
DISPATCH = slice(15, 18)
DELIVERY = slice(18, 21)
PROBLEM = slice(22, 25)


def test_header_layout():
    assert len(HEADER_CELLS) == 25
    assert header_row().cells()[:3] == ["Courier", "Tracking number", "Executed"]
    assert [i for i, c in enumerate(HEADER_CELLS) if c == SEPARATOR] == [3, 7, 11, 21]


def test_classify_none_result():
    assert classify(REQUEST, None) is None


def test_classify_full_row(sample_traces):
    result = ShipmentResult(state="3", state_ex="301", location="Beijing", traces=sample_traces)
    row = classify(REQUEST, result)

    assert isinstance(row, DataRow)
    cells = row.cells()
    assert len(cells) == len(HEADER_CELLS)

    assert cells[:4] == ["JD", "JD0001", EXECUTED, SEPARATOR]
    assert cells[STATUS] == "delivered"
    assert cells[STATUS_EX] == "delivered (normal)"
    assert cells[CITY] == "Beijing"

    assert cells[LATEST] == ["2024-05-04 10:30:00", "Signed by recipient", "Beijing"]
    assert cells[PICKUP] == ["2024-05-01 09:00:00", "Picked up in Shenzhen", "Shenzhen"]
    assert cells[DISPATCH] == ["2024-05-04 08:00:00", "Out for delivery again", "Beijing"]
    assert cells[DELIVERY] == ["2024-05-04 10:30:00", "Signed by recipient", "Beijing"]
    assert cells[PROBLEM] == ["2024-05-03 12:00:00", "Recipient unreachable", "Beijing"]


def test_classify_without_traces_keeps_width():
    result = ShipmentResult(state="0", state_ex="")
    cells = classify(REQUEST, result).cells()

    assert len(cells) == len(HEADER_CELLS)
    assert cells[STATUS] == "no tracking information"
    assert cells[STATUS_EX] == "unknown "
    assert cells[CITY] == ""
    for block in (LATEST, PICKUP, DISPATCH, DELIVERY, PROBLEM):
        assert cells[block] == ["", "", ""]


def test_classify_single_pickup_event():
    event = TraceEvent(action="1", station="A", time="t1", location="L1")
    result = ShipmentResult(state="3", traces=[event])
    cells = classify(REQUEST, result).cells()

    assert cells[PICKUP] == ["t1", "A", "L1"]
    assert cells[LATEST] == ["t1", "A", "L1"]
    assert cells[DELIVERY] == ["", "", ""]


def test_classify_unknown_state():
    cells = classify(REQUEST, ShipmentResult(state="8", state_ex="888")).cells()
    assert cells[STATUS] == "unknown 8"
    assert cells[STATUS_EX] == "unknown 888"


def test_classify_echoes_raw_courier():
    request = ShipmentRequest(courier="JD Logistics", tracking_number="JD0001")
    cells = classify(request, ShipmentResult(state="2")).cells()
    assert cells[0] == "JD Logistics"
