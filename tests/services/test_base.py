"""Tests for BaseService and service inheritance."""

from __future__ import annotations

import pytest

from ruleskit.infrastructure.kit import Kit
from ruleskit.services.base import BaseService
from ruleskit.services.catalog import CatalogService
from ruleskit.services.generate import GenerateService


class TestBaseService:
    def test_kit_stored(self, kit: Kit) -> None:
        assert BaseService(kit)._kit is kit

    @pytest.mark.parametrize("service_cls", [GenerateService, CatalogService])
    def test_services_extend_base(self, service_cls: type[BaseService]) -> None:
        assert issubclass(service_cls, BaseService)

    def test_dispatch_without_plugins(self, kit: Kit) -> None:
        warnings: list[str] = []
        BaseService(kit)._dispatch_event(
            "post_generate",
            {"stack": "demo", "rules_dir": "x", "files_written": 0, "backup_path": None, "stats": {}},
            warnings,
        )
        assert warnings == []

    def test_dispatch_unknown_hook_is_warning(self, kit: Kit) -> None:
        warnings: list[str] = []
        BaseService(kit)._dispatch_event("no_such_hook", {}, warnings)
        assert warnings == ["Plugin hook no_such_hook failed"]
