from pathlib import Path

import pytest

from api_inspector.analyzer.diff import analyze_endpoint_diffs
from api_inspector.capture.base import CapturedExchange
from api_inspector.capture.grouping import (
    endpoint_exchanges,
    filter_exchanges,
    group_endpoints,
    latency_stats,
    unique_endpoints,
)
from api_inspector.capture.jsonl import parse_jsonl
from api_inspector.config import Settings

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def exchanges():
    return parse_jsonl(FIXTURES / "capture.jsonl")


def _by_endpoint(groups):
    return {g.endpoint: g for g in groups}


class TestUniqueEndpoints:
    def test_ordered_by_count(self, exchanges):
        assert unique_endpoints(exchanges) == [
            ("GET", "/api/users", 3),
            ("POST", "/api/users", 2),
            ("GET", "/api/health", 1),
        ]

    def test_empty(self):
        assert unique_endpoints([]) == []


class TestFilterExchanges:
    def test_method_is_case_insensitive_and_path_is_substring(self, exchanges):
        result = filter_exchanges(exchanges, method="get", path="users")
        assert [ex.timestamp for ex in result] == [3000, 2000, 1000]

    def test_status_and_session(self, exchanges):
        assert len(filter_exchanges(exchanges, status_code=500)) == 1
        assert len(filter_exchanges(exchanges, session_id="s1")) == 2

    def test_limit_keeps_newest(self, exchanges):
        result = filter_exchanges(exchanges, limit=1)
        assert result[0].timestamp == 5000


class TestEndpointExchanges:
    def test_newest_first(self, exchanges):
        result = endpoint_exchanges(exchanges, "get", "/api/users", limit=2)
        assert [ex.timestamp for ex in result] == [3000, 2000]


class TestGroupEndpoints:
    def test_shapes_from_successful_json_bodies(self, exchanges):
        groups = _by_endpoint(group_endpoints(exchanges))
        users = groups["GET /api/users"]
        assert users.request_count == 3
        assert len(users.shapes) == 3
        assert users.shapes[0] == {"id": "number", "name": "string", "email": "string", "age": "number"}
        assert users.shapes[1] == {"id": "number", "name": "string", "age": "string"}

    def test_stats(self, exchanges):
        users = _by_endpoint(group_endpoints(exchanges))["GET /api/users"]
        assert users.first_seen == 1000
        assert users.last_seen == 3000
        assert users.status_codes == [200]
        assert users.avg_duration == 16.0

    def test_non_json_and_failed_responses_skipped(self, exchanges):
        groups = _by_endpoint(group_endpoints(exchanges))
        assert groups["GET /api/health"].shapes == []
        post = groups["POST /api/users"]
        assert post.shapes == []
        assert post.status_codes == [500]
        assert post.avg_duration == 40.0

    def test_endpoint_limit(self, exchanges):
        groups = _by_endpoint(group_endpoints(exchanges, Settings(endpoint_limit=2)))
        users = groups["GET /api/users"]
        assert len(users.shapes) == 2
        assert users.request_count == 3
        assert users.first_seen == 2000

    def test_success_range_from_settings(self, exchanges):
        groups = _by_endpoint(group_endpoints(exchanges, Settings(success_status_max=599)))
        assert groups["POST /api/users"].shapes == [{"error": "string"}]

    def test_json_null_body_has_null_shape(self):
        ex = CapturedExchange(method="GET", path="/n", status_code=200, response_body="null")
        assert group_endpoints([ex])[0].shapes == ["null"]

    def test_deeply_nested_bodies_are_analyzed(self):
        body = '{"a":' * 700 + "1" + "}" * 700
        deep = [
            CapturedExchange(method="GET", path="/deep", status_code=200, response_body=body, timestamp=t)
            for t in (1, 2)
        ]
        group = group_endpoints(deep)[0]
        assert len(group.shapes) == 2

        node = group.shapes[0]
        for _ in range(700):
            node = node["a"]
        assert node == "number"

        analysis = analyze_endpoint_diffs(group)
        assert analysis.total_shapes == 2
        assert not analysis.has_inconsistencies

    def test_body_too_deep_to_decode_is_skipped(self):
        too_deep = CapturedExchange(method="GET", path="/deep", status_code=200, response_body="[" * 5000 + "]" * 5000)
        ok = CapturedExchange(method="GET", path="/deep", status_code=200, response_body='{"id": 1}')
        group = group_endpoints([too_deep, ok])[0]
        assert group.shapes == [{"id": "number"}]
        assert group.request_count == 2


class TestLatencyStats:
    def test_per_endpoint(self, exchanges):
        stats = {s["endpoint"]: s for s in latency_stats(exchanges)}
        users = stats["GET /api/users"]
        assert users["avgLatency"] == 16.0
        assert users["minLatency"] == 12
        assert users["maxLatency"] == 20
        assert users["count"] == 3
        assert stats["POST /api/users"]["count"] == 1

    def test_skips_endpoints_without_durations(self):
        ex = CapturedExchange(method="GET", path="/a")
        assert latency_stats([ex]) == []
