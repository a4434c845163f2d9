"""BaseService — foundation for all ruleskit services.

Every service receives a :class:`Kit` at construction time. The Kit provides
the template root, cached kit configuration, stack registry and plugins.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ruleskit.infrastructure.kit import Kit

logger = logging.getLogger(__name__)


class BaseService:
    """Base for all service-layer classes."""

    def __init__(self, kit: Kit) -> None:
        self._kit = kit

    def _dispatch_event(self, hook_name: str, payload: dict[str, Any], warnings: list[str]) -> None:
        """Dispatch a lifecycle hook to plugins.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        try:
            self._kit.plugins.dispatch(hook_name, payload)
        except Exception:
            logger.debug("Hook dispatch failed for %s", hook_name, exc_info=True)
            warnings.append(f"Plugin hook {hook_name} failed")
