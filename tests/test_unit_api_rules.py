"""
Unit tests for the rules API endpoints.

Tests cover:
- Evaluation responses and EvaluationError mapping
- Required key listing
- Precondition checks with missing key reporting
- Payload depth and node count limits
"""

from unittest.mock import patch

import pytest

from jsonlogic_rules.core.config import settings
from jsonlogic_rules.core.observability import metrics

TEMP_RULE = {"and": [{">": [{"var": "temp"}, 0]}, {"<": [{"var": "temp"}, 100]}]}


class TestEvaluateEndpoint:
    """Tests for POST /api/v1/rules/evaluate."""

    @pytest.mark.anyio
    async def test_evaluate_with_data(self, client):
        resp = client.post("/api/v1/rules/evaluate", json={"rule": TEMP_RULE, "data": {"temp": 72}})
        assert resp.status_code == 200
        assert resp.json() == {"result": True}

    @pytest.mark.anyio
    async def test_evaluate_without_data(self, client):
        resp = client.post("/api/v1/rules/evaluate", json={"rule": {"==": [1, 1]}})
        assert resp.status_code == 200
        assert resp.json() == {"result": True}

    @pytest.mark.anyio
    async def test_evaluate_non_boolean_result(self, client):
        resp = client.post(
            "/api/v1/rules/evaluate", json={"rule": {"+": [{"var": "a"}, 2]}, "data": {"a": 3}}
        )
        assert resp.status_code == 200
        assert resp.json() == {"result": 5}

    @pytest.mark.anyio
    async def test_evaluation_error_maps_to_422(self, client):
        resp = client.post("/api/v1/rules/evaluate", json={"rule": {"no_such_operator": [1]}})
        assert resp.status_code == 422
        body = resp.json()
        assert body["error"] == "EvaluationError"
        assert body["message"].startswith("Failed to evaluate rule: ")
        assert body["details"]["operator"] == "no_such_operator"

    @pytest.mark.anyio
    async def test_rule_is_required(self, client):
        resp = client.post("/api/v1/rules/evaluate", json={"data": {}})
        assert resp.status_code == 422


class TestRequiredKeysEndpoint:
    """Tests for POST /api/v1/rules/required-keys."""

    @pytest.mark.anyio
    async def test_lists_keys_in_first_use_order(self, client):
        rule = {
            "and": [
                {">": [{"var": "age"}, 18]},
                {"==": [{"var": "status"}, "active"]},
                {"<": [{"var": "age"}, 65]},
            ]
        }
        resp = client.post("/api/v1/rules/required-keys", json={"rule": rule})
        assert resp.status_code == 200
        assert resp.json() == {"required_keys": ["age", "status"]}

    @pytest.mark.anyio
    async def test_null_rule(self, client):
        resp = client.post("/api/v1/rules/required-keys", json={"rule": None})
        assert resp.status_code == 200
        assert resp.json() == {"required_keys": []}


class TestCanExecuteEndpoint:
    """Tests for POST /api/v1/rules/can-execute."""

    @pytest.mark.anyio
    async def test_executable(self, client):
        resp = client.post(
            "/api/v1/rules/can-execute", json={"rule": TEMP_RULE, "data": {"temp": None}}
        )
        assert resp.status_code == 200
        assert resp.json() == {
            "can_execute": True,
            "required_keys": ["temp"],
            "missing_keys": [],
        }

    @pytest.mark.anyio
    async def test_reports_missing_keys(self, client):
        rule = {"and": [{"var": "user.age"}, {"var": "user.name"}, {"var": "plan"}]}
        resp = client.post(
            "/api/v1/rules/can-execute", json={"rule": rule, "data": {"user": {"age": 30}}}
        )
        assert resp.status_code == 200
        assert resp.json() == {
            "can_execute": False,
            "required_keys": ["user.age", "user.name", "plan"],
            "missing_keys": ["user.name", "plan"],
        }

    @pytest.mark.anyio
    async def test_static_rule_without_data(self, client):
        resp = client.post("/api/v1/rules/can-execute", json={"rule": {"==": [1, 1]}})
        assert resp.status_code == 200
        assert resp.json()["can_execute"] is True

    @pytest.mark.anyio
    async def test_precondition_metrics(self, client):
        def count(result: str) -> float:
            value = metrics.registry.get_sample_value(
                "rule_precondition_checks_total", {"result": result}
            )
            return value or 0.0

        before_ok, before_missing = count("executable"), count("missing_keys")

        client.post("/api/v1/rules/can-execute", json={"rule": {"var": "a"}, "data": {"a": 1}})
        client.post("/api/v1/rules/can-execute", json={"rule": {"var": "a"}, "data": {}})

        assert count("executable") == before_ok + 1
        assert count("missing_keys") == before_missing + 1


class TestPayloadLimits:
    """Tests for rule depth and node count limits on request bodies."""

    @pytest.mark.anyio
    async def test_rule_too_deep(self, client):
        rule = {"var": "a"}
        for _ in range(5):
            rule = {"!": [rule]}

        with patch.object(settings, "rule_max_depth", 4):
            resp = client.post("/api/v1/rules/required-keys", json={"rule": rule})

        assert resp.status_code == 422

    @pytest.mark.anyio
    async def test_rule_too_many_nodes(self, client):
        rule = {"in": [{"var": "x"}, list(range(50))]}

        with patch.object(settings, "rule_max_nodes", 20):
            resp = client.post("/api/v1/rules/required-keys", json={"rule": rule})

        assert resp.status_code == 422

    @pytest.mark.anyio
    async def test_data_is_limited_too(self, client):
        data = {"a": {"b": {"c": {"d": 1}}}}

        with patch.object(settings, "rule_max_depth", 2):
            resp = client.post(
                "/api/v1/rules/can-execute", json={"rule": {"==": [1, 1]}, "data": data}
            )

        assert resp.status_code == 422

    @pytest.mark.anyio
    async def test_within_limits(self, client):
        with patch.object(settings, "rule_max_depth", 3):
            resp = client.post(
                "/api/v1/rules/required-keys", json={"rule": {"==": [{"var": "a"}, 1]}}
            )

        assert resp.status_code == 200
        assert resp.json() == {"required_keys": ["a"]}
