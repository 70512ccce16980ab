"""
Similarity group detection.

Pass 1 seeds groups single-link around each ungrouped key. Pass 2 merges
seed groups that overlap or have any similar cross pair, closing over
chains of similarity with a disjoint-set structure.
"""

import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import locforge_config as config
from locforge_enums import SimilarityReason
from locforge_exceptions import KeyValidationError
from locforge_logger import get_logger
from core.similarity_checker import SimilarityThresholds, compare_texts

logger = get_logger("core.group_builder")

GROUP_KEY_DELIMITER = config.GROUP_KEY_DELIMITER

# Detection is not safe against concurrent mutation of the group set
_detection_lock = threading.Lock()


def validate_key(text: str) -> str:
    if GROUP_KEY_DELIMITER in text:
        raise KeyValidationError(
            f"Key contains the reserved group delimiter '{GROUP_KEY_DELIMITER}'",
            key=text, delimiter=GROUP_KEY_DELIMITER,
        )
    return text


def make_group_key(texts: Iterable[str]) -> str:
    """Order-independent identity of a group: members sorted and joined."""
    return GROUP_KEY_DELIMITER.join(sorted(texts))


def split_group_key(group_key: str) -> List[str]:
    return group_key.split(GROUP_KEY_DELIMITER)


def default_selection(texts: List[str]) -> Optional[str]:
    """Longest member; the first one wins a tie."""
    if not texts:
        return None
    best = texts[0]
    for text in texts[1:]:
        if len(text) > len(best):
            best = text
    return best


@dataclass
class SimilarityGroup:
    texts: List[str]
    selected_text: Optional[str] = None
    reason: str = ""
    average_score: float = 0.0
    source_info: Optional[str] = None
    reason_code: SimilarityReason = SimilarityReason.NONE

    def __post_init__(self):
        if self.selected_text is None:
            self.selected_text = default_selection(self.texts)

    @property
    def group_key(self) -> str:
        return make_group_key(self.texts)

    def __len__(self):
        return len(self.texts)

    def __contains__(self, text):
        return text in self.texts


class _UnionFind:
    def __init__(self, size: int) -> None:
        self._parent = list(range(size))
        self._rank = [0] * size

    def find(self, item: int) -> int:
        parent = self._parent[item]
        if parent != item:
            self._parent[item] = self.find(parent)
        return self._parent[item]

    def union(self, left: int, right: int) -> bool:
        root_left = self.find(left)
        root_right = self.find(right)
        if root_left == root_right:
            return False
        if self._rank[root_left] < self._rank[root_right]:
            root_left, root_right = root_right, root_left
        self._parent[root_right] = root_left
        if self._rank[root_left] == self._rank[root_right]:
            self._rank[root_left] += 1
        return True


@dataclass
class _SeedGroup:
    texts: List[str]
    scores: List[float]
    reason: str = ""
    reason_code: SimilarityReason = SimilarityReason.NONE
    members: set = field(default_factory=set)

    def __post_init__(self):
        self.members = set(self.texts)


def _prepare_texts(texts: Iterable[str], strict: bool) -> List[str]:
    prepared = []
    seen = set()
    for text in texts:
        if not text or not text.strip():
            continue
        if text in seen:
            continue
        try:
            validate_key(text)
        except KeyValidationError as e:
            if strict:
                raise
            logger.warning(f"Skipping key for similarity detection: {e}")
            continue
        seen.add(text)
        prepared.append(text)
    return prepared


def _build_seed_groups(text_list: List[str], thresholds: SimilarityThresholds) -> List[_SeedGroup]:
    processed = set()
    seeds = []

    for i, seed in enumerate(text_list):
        if seed in processed:
            continue

        texts = [seed]
        scores = [1.0]
        reason = ""
        reason_code = SimilarityReason.NONE

        for j, other in enumerate(text_list):
            if i == j or other in processed:
                continue
            result = compare_texts(seed, other, thresholds)
            if result.is_similar:
                texts.append(other)
                scores.append(result.score)
                if not reason:
                    reason = result.message
                    reason_code = result.reason

        if len(texts) > 1:
            seeds.append(_SeedGroup(texts, scores, reason, reason_code))
            processed.update(texts)

    return seeds


def _groups_should_merge(first: _SeedGroup, second: _SeedGroup, thresholds: SimilarityThresholds) -> bool:
    if first.members & second.members:
        return True
    for text1 in first.texts:
        for text2 in second.texts:
            if compare_texts(text1, text2, thresholds).is_similar:
                return True
    return False


def _merge_seed_groups(seeds: List[_SeedGroup], thresholds: SimilarityThresholds) -> List[List[int]]:
    uf = _UnionFind(len(seeds))
    for i in range(len(seeds)):
        for j in range(i + 1, len(seeds)):
            if uf.find(i) == uf.find(j):
                continue
            if _groups_should_merge(seeds[i], seeds[j], thresholds):
                uf.union(i, j)

    components: Dict[int, List[int]] = {}
    for index in range(len(seeds)):
        components.setdefault(uf.find(index), []).append(index)
    return list(components.values())


def build_similarity_groups(texts: Iterable[str], thresholds: Optional[SimilarityThresholds] = None,
                            source_info: Optional[str] = None, strict: bool = False) -> List[SimilarityGroup]:
    """
    Detect groups of near-duplicate keys.

    Args:
        texts: Candidate keys; empty and whitespace-only entries are skipped
        thresholds: Classification thresholds (defaults if None)
        source_info: Free-text provenance copied onto every group
        strict: Raise KeyValidationError on delimiter-containing keys instead of skipping them

    Returns:
        Groups of two or more members, highest average score first
    """
    thresholds = (thresholds or SimilarityThresholds()).validate()

    with _detection_lock:
        text_list = _prepare_texts(texts, strict)
        seeds = _build_seed_groups(text_list, thresholds)
        components = _merge_seed_groups(seeds, thresholds)

        groups = []
        for indices in components:
            first = seeds[indices[0]]
            members = []
            scores = []
            for index in indices:
                for text in seeds[index].texts:
                    if text not in members:
                        members.append(text)
                # pass-1 scores only; cross pairs found while merging are not averaged in
                scores.extend(seeds[index].scores)

            groups.append(SimilarityGroup(
                texts=members,
                reason=first.reason,
                average_score=sum(scores) / len(scores),
                source_info=source_info,
                reason_code=first.reason_code,
            ))

    groups.sort(key=lambda g: g.average_score, reverse=True)
    logger.info(f"Similarity detection: {len(text_list)} keys, {len(seeds)} seed groups, {len(groups)} groups")
    return groups
