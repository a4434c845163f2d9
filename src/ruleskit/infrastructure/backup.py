"""BackupManager — snapshot an existing output tree before a run rewrites it.

A snapshot is a full copy next to the original, named
``<destination>-backup-<timestamp>``. Copy failures are reported, never
raised: the run goes on and writes over the existing tree in place.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from ruleskit.domain.models import BackupPolicy, BackupSnapshot

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

logger = logging.getLogger(__name__)


def backup_timestamp(moment: datetime) -> str:
    """UTC ISO timestamp with milliseconds, filesystem-safe.

    ``2026-10-19T08:30:12.345Z`` becomes ``2026-10-19T08-30-12-345Z``.
    """
    iso = moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


def backup_path_for(destination: Path, stamp: str) -> Path:
    """First free backup name for *destination*; collisions get a ``-N`` suffix."""
    base = f"{destination.name}-backup-{stamp}"
    target = destination.with_name(base)
    counter = 1
    while target.exists():
        target = destination.with_name(f"{base}-{counter}")
        counter += 1
    return target


@dataclass(frozen=True)
class BackupOutcome:
    """Result of :meth:`BackupManager.prepare`.

    Attributes:
        snapshot: The completed copy, when one was taken.
        error: Why the copy failed, when it did.
        aborted: The destination exists and the policy is ``abort``.
        cleared: The destination was emptied for the new run.
    """

    snapshot: BackupSnapshot | None = None
    error: str | None = None
    aborted: bool = False
    cleared: bool = False


class BackupManager:
    """Applies a :class:`BackupPolicy` to one destination directory."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(UTC))

    def snapshot(self, destination: Path) -> BackupOutcome:
        """Copy *destination* aside. A missing destination is a no-op."""
        if not destination.exists():
            return BackupOutcome()

        moment = self._clock()
        target = backup_path_for(destination, backup_timestamp(moment))
        try:
            shutil.copytree(destination, target, symlinks=True)
        except OSError as exc:
            logger.warning("Backup of %s failed: %s", destination, exc)
            if target.exists():
                shutil.rmtree(target, ignore_errors=True)
            return BackupOutcome(error=f"{destination}: {exc}")

        logger.info("Backed up %s to %s", destination, target)
        return BackupOutcome(snapshot=BackupSnapshot(destination, target, moment))

    def prepare(self, destination: Path, policy: BackupPolicy) -> BackupOutcome:
        """Make *destination* ready for a run under *policy*.

        Raises:
            OSError: If clearing the destination fails.
        """
        if not destination.exists():
            return BackupOutcome()

        if policy is BackupPolicy.ABORT:
            logger.info("Destination %s exists; aborting", destination)
            return BackupOutcome(aborted=True)

        if policy is BackupPolicy.BACKUP:
            outcome = self.snapshot(destination)
            if outcome.snapshot is None:
                return outcome
            clear_tree(destination)
            return BackupOutcome(snapshot=outcome.snapshot, cleared=True)

        clear_tree(destination)
        return BackupOutcome(cleared=True)


def clear_tree(destination: Path) -> None:
    """Remove *destination* (directory or file) entirely."""
    if destination.is_dir() and not destination.is_symlink():
        shutil.rmtree(destination)
    else:
        destination.unlink()
    logger.debug("Cleared %s", destination)
