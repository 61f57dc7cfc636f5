import pytest

from api_inspector.analyzer.base import EndpointDiffAnalysis, GroupedEndpoint, Inconsistency
from api_inspector.capture.base import CapturedExchange, row_to_exchange, rows_to_exchanges
from api_inspector.errors import CaptureFormatError


class TestCapturedExchange:
    def test_create_minimal_exchange(self):
        ex = CapturedExchange(method="get", path="/api/users")
        assert ex.method == "GET"
        assert ex.status_code is None
        assert ex.request_headers == {}
        assert ex.endpoint == "GET /api/users"

    def test_decoded_body_is_stored_as_text(self):
        ex = CapturedExchange(method="GET", path="/x", response_body={"id": 1})
        assert ex.response_body == '{"id": 1}'
        assert ex.json_body() == {"id": 1}

    def test_bytes_body_decoded(self):
        ex = CapturedExchange(method="GET", path="/x", response_body=b'{"ok": true}')
        assert ex.json_body() == {"ok": True}

    def test_non_json_body(self):
        ex = CapturedExchange(method="GET", path="/x", response_body="<html></html>")
        assert ex.json_body() is None
        assert ex.json_body(default="fallback") == "fallback"

    def test_empty_body(self):
        ex = CapturedExchange(method="GET", path="/x", response_body="")
        assert ex.json_body() is None

    def test_json_null_body_decodes_to_none(self):
        ex = CapturedExchange(method="GET", path="/x", response_body="null")
        assert ex.json_body(default="missing") is None

    def test_serialization_roundtrip(self):
        ex = CapturedExchange(method="POST", path="/api/users", status_code=201, response_body='{"id": 5}')
        ex2 = CapturedExchange(**ex.model_dump())
        assert ex2 == ex


class TestRowToExchange:
    def test_snake_case_row(self):
        ex = row_to_exchange({
            "session_id": "s1",
            "method": "get",
            "path": "/a",
            "status_code": 200,
            "duration_ms": 7,
            "request_headers": '{"accept": "*/*"}',
            "response_body": "{}",
            "timestamp": 10,
        })
        assert ex.session_id == "s1"
        assert ex.method == "GET"
        assert ex.status_code == 200
        assert ex.duration_ms == 7
        assert ex.request_headers == {"accept": "*/*"}
        assert ex.timestamp == 10

    def test_camel_case_row(self):
        ex = row_to_exchange({"sessionId": "s2", "method": "PUT", "path": "/b", "statusCode": 204, "durationMs": 3})
        assert ex.session_id == "s2"
        assert ex.status_code == 204
        assert ex.duration_ms == 3

    def test_malformed_header_column_is_empty(self):
        ex = row_to_exchange({"method": "GET", "path": "/", "response_headers": "not json"})
        assert ex.response_headers == {}

    def test_invalid_row_raises(self):
        with pytest.raises(CaptureFormatError, match="row 1"):
            rows_to_exchanges([{"method": "GET", "path": "/"}, {"method": "GET", "status_code": "abc"}])

    def test_non_object_row_raises(self):
        with pytest.raises(CaptureFormatError):
            rows_to_exchanges(["GET /"])


class TestInconsistency:
    def test_missing_singular(self):
        item = Inconsistency(kind="missing", path="email", total=2, missing_count=1)
        assert item.message == "field 'email' missing in 1 response"

    def test_missing_plural(self):
        item = Inconsistency(kind="missing", path="user.bio", total=5, missing_count=3)
        assert item.message == "field 'user.bio' missing in 3 responses"

    def test_type_conflict(self):
        item = Inconsistency(kind="type_conflict", path="age", total=2, types=["number", "string"])
        assert item.message == "field 'age' has inconsistent types: number, string"


class TestEndpointModels:
    def test_grouped_endpoint_defaults(self):
        ep = GroupedEndpoint(method="GET", path="/a", shapes=[])
        assert ep.endpoint == "GET /a"
        assert ep.status_codes == []
        assert ep.avg_duration == 0.0

    def test_analysis_splits_kinds(self):
        analysis = EndpointDiffAnalysis(
            endpoint="GET /a",
            method="GET",
            path="/a",
            shapes=[{}, {}],
            total_shapes=2,
            inconsistencies=[
                Inconsistency(kind="missing", path="x", total=2, missing_count=1),
                Inconsistency(kind="type_conflict", path="y", total=2, types=["number", "null"]),
            ],
        )
        assert [i.path for i in analysis.missing_fields] == ["x"]
        assert [i.path for i in analysis.type_conflicts] == ["y"]
        assert analysis.has_inconsistencies is True
