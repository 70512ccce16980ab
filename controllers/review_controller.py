# -*- coding: utf-8 -*-
"""
LocForge Similarity Review Controller

Drives the review of detected near-duplicate keys:
- Detection over the catalog keys, seeded with persisted decisions
- Pending canonical selections per group
- Writing all pending decisions to the registry in one batch
"""

import threading
from typing import Dict, List, Optional

from PySide6.QtCore import QObject, Signal

from locforge_logger import get_logger
from core.canonical_registry import CanonicalRegistry
from core.group_builder import SimilarityGroup, build_similarity_groups, split_group_key
from core.language_data import TranslationCatalog
from core.similarity_checker import SimilarityThresholds

logger = get_logger("controllers.review")


class SimilarityReviewSession(QObject):
    """
    One review pass over the catalog keys.

    A pending selection of None means the group is accepted as distinct.

    Signals:
        report_generated(int): Number of groups found
        decisions_applied(int): Number of groups written to the registry
    """

    report_generated = Signal(int)
    decisions_applied = Signal(int)

    def __init__(self, registry: CanonicalRegistry, catalog: TranslationCatalog,
                 thresholds: Optional[SimilarityThresholds] = None, parent=None):
        super().__init__(parent)
        self.registry = registry
        self.catalog = catalog
        self.thresholds = thresholds or SimilarityThresholds()
        self._groups: List[SimilarityGroup] = []
        self._pending: Dict[str, Optional[str]] = {}
        self._lock = threading.Lock()

    @property
    def groups(self) -> List[SimilarityGroup]:
        return list(self._groups)

    def pending_selection(self, group: SimilarityGroup) -> Optional[str]:
        return self._pending.get(group.group_key)

    # =========================================================================
    # BUILDING THE REPORT
    # =========================================================================

    def generate_report(self, source_info: Optional[str] = None) -> List[SimilarityGroup]:
        """Detect groups among the catalog keys and restore any saved decisions."""
        groups = build_similarity_groups(self.catalog.all_keys, self.thresholds, source_info)

        self._groups = groups
        self._pending = {}
        restored = 0
        for group in groups:
            selected, _accepted = self.registry.get_status(group.texts)
            if selected is not None:
                group.selected_text = selected
                restored += 1
            self._pending[group.group_key] = selected

        logger.info(f"Similarity report: {len(groups)} groups ({restored} with saved decisions)")
        self.report_generated.emit(len(groups))
        return self.groups

    def load_existing_groups(self) -> List[SimilarityGroup]:
        """Rebuild groups from what the registry already stores."""
        decisions = self.registry.decisions()
        metadata = self.registry.metadata()

        groups = []
        self._pending = {}
        for group_key in sorted(set(decisions) | set(metadata)):
            members = split_group_key(group_key)
            if len(members) < 2:
                logger.warning(f"Skipping malformed stored group '{group_key}'")
                continue

            meta = metadata.get(group_key)
            selected = decisions.get(group_key)
            group = SimilarityGroup(
                texts=members,
                selected_text=selected,
                reason=meta.reason if meta else "",
                average_score=meta.similarity_score if meta else 0.0,
                source_info=meta.source_info if meta else None,
            )
            groups.append(group)
            self._pending[group_key] = selected

        self._groups = groups
        logger.debug(f"Loaded {len(groups)} stored groups")
        self.report_generated.emit(len(groups))
        return self.groups

    # =========================================================================
    # DECISIONS
    # =========================================================================

    def select(self, group: SimilarityGroup, text: str) -> bool:
        """Pick the canonical text of a group. Returns False if text is not a member."""
        if text not in group:
            logger.warning(f"'{text}' is not a member of group '{group.group_key}'")
            return False
        group.selected_text = text
        self._pending[group.group_key] = text
        return True

    def accept_as_distinct(self, group: SimilarityGroup):
        self._pending[group.group_key] = None

    def apply(self) -> int:
        """Write every pending decision and its metadata. Returns the number of groups written."""
        with self._lock:
            count = 0
            for group in self._groups:
                key = group.group_key
                if key not in self._pending:
                    continue
                self.registry.set_status(group.texts, self._pending[key])
                self.registry.set_metadata(group.texts, group.reason, group.average_score, group.source_info)
                count += 1

        logger.info(f"Applied {count} group decisions")
        self.decisions_applied.emit(count)
        return count
