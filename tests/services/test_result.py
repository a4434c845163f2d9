"""Tests for ServiceResult and ServiceError."""

import json

import pytest
from pydantic import ValidationError

from ruleskit.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="generate", data={"files": ["demo/rules.mdc"]})
        assert result.ok is True
        assert result.op == "generate"
        assert result.data == {"files": ["demo/rules.mdc"]}
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_error_construction(self) -> None:
        result = ServiceResult(ok=False, op="generate", error=ServiceError(code="ABORTED", message="exists"))
        assert result.error is not None
        assert result.error.code == "ABORTED"
        assert result.error.detail == {}

    def test_json_serialization(self) -> None:
        result = ServiceResult(ok=True, op="catalog_stacks", data={"count": 2}, meta={"duration_ms": 3})
        parsed = json.loads(result.model_dump_json())
        assert parsed["ok"] is True
        assert parsed["data"]["count"] == 2
        assert parsed["meta"]["duration_ms"] == 3

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="generate")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]


class TestServiceError:
    def test_with_detail(self) -> None:
        error = ServiceError(code="GENERATION_FAILED", message="disk full", detail={"path": "/tmp/x.mdc"})
        assert error.detail["path"] == "/tmp/x.mdc"
