"""Core cache orchestration.

- KeyBuilder: primary and fallback cache keys
- RestoreOrchestrator / PersistOrchestrator / StaleEntryReaper: the
  restore, persist and prune steps of a job
- HandoffSlot: keys passed between the pre and post phases
- resolve_platform: platform strategy selection
"""

from __future__ import annotations

from .handoff import HandoffSlot
from .keys import KeyBuilder, sanitize_segment
from .persist import PersistOrchestrator, PersistResult, epoch_millis
from .platform import PlatformStrategy, PlatformVariant, resolve_platform
from .reaper import ReapResult, StaleEntryReaper, select_stale_entries
from .restore import RestoreOrchestrator, RestoreResult

__all__ = [
    "HandoffSlot",
    "KeyBuilder",
    "PersistOrchestrator",
    "PersistResult",
    "PlatformStrategy",
    "PlatformVariant",
    "ReapResult",
    "RestoreOrchestrator",
    "RestoreResult",
    "StaleEntryReaper",
    "epoch_millis",
    "resolve_platform",
    "sanitize_segment",
    "select_stale_entries",
]
