"""Tests for N1QL request construction."""

from n1ql_adapter.db.request import N1qlRequest, ScanConsistency, build_request


def test_from_string_defaults():
    request = N1qlRequest.from_string("SELECT 1")
    assert request.statement == "SELECT 1"
    assert request.args == []
    assert request.consistency is None


def test_build_request_copies_bindings_in_order():
    bindings = ("a", 1, None)
    request = build_request("SELECT ?, ?, ?", bindings)
    assert request.args == ["a", 1, None]
    assert isinstance(request.args, list)


def test_build_request_with_consistency():
    request = build_request("SELECT 1", consistency=ScanConsistency.REQUEST_PLUS)
    assert request.consistency is ScanConsistency.REQUEST_PLUS


def test_payload_minimal():
    assert N1qlRequest.from_string("SELECT 1").to_payload() == {"statement": "SELECT 1"}


def test_payload_with_args_and_consistency():
    request = build_request(
        "SELECT * FROM b WHERE id = ?", ["k1"], consistency=ScanConsistency.REQUEST_PLUS
    )
    assert request.to_payload() == {
        "statement": "SELECT * FROM b WHERE id = ?",
        "args": ["k1"],
        "scan_consistency": "request_plus",
    }
