import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from locforge_exceptions import RegistryLoadError, RegistrySaveError
from locforge_logger import get_logger
from core.group_builder import make_group_key, split_group_key, validate_key

logger = get_logger("core.canonical_registry")


@dataclass
class GroupMetadata:
    reason: str
    similarity_score: float
    source_info: Optional[str]
    created_time: datetime
    last_modified_time: datetime


@dataclass(frozen=True)
class CanonicalCache:
    """Read-only projection of every group decision; replaced, never patched."""
    text_to_group_key: Mapping[str, str]
    canonical_text: Mapping[str, str]

    def __len__(self):
        return len(self.canonical_text)


class CanonicalRegistry:
    """
    Stores operator decisions for similarity groups and resolves any grouped
    text to its canonical form.

    Decisions and metadata are persisted in SQLite and mirrored in memory.
    The canonical cache is rebuilt lazily and in full after any write.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = str(db_path) if db_path else ":memory:"
        self.conn = None
        self._lock = threading.RLock()
        self._decisions: Dict[str, str] = {}  # group_key -> selected_text
        self._metadata: Dict[str, GroupMetadata] = {}
        self._cache: Optional[CanonicalCache] = None

        self.init_db()

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def init_db(self):
        try:
            self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._create_tables()
            self._load()
        except (sqlite3.Error, ValueError) as e:
            # ValueError: unparseable timestamp in group_metadata
            logger.error(f"Failed to open registry DB ({self.db_path}): {e}")
            if self.conn:
                self.conn.close()
            self.conn = None
            raise RegistryLoadError(f"Cannot open registry database: {e}", db_path=self.db_path) from e

    def _create_tables(self):
        c = self.conn.cursor()
        c.execute("""
            CREATE TABLE IF NOT EXISTS group_decisions (
                group_key TEXT PRIMARY KEY,
                selected_text TEXT NOT NULL
            )
        """)
        c.execute("""
            CREATE TABLE IF NOT EXISTS group_metadata (
                group_key TEXT PRIMARY KEY,
                reason TEXT,
                similarity_score REAL,
                source_info TEXT,
                created_time TEXT,
                last_modified_time TEXT
            )
        """)
        self.conn.commit()

    def _load(self):
        c = self.conn.cursor()
        c.execute("SELECT group_key, selected_text FROM group_decisions")
        self._decisions = {}
        for key, selected in c.fetchall():
            problem = self._decision_problem(key, selected)
            if problem:
                logger.warning(f"Ignoring stored decision for '{key}': {problem}")
                continue
            self._decisions[key] = selected

        c.execute("SELECT group_key, reason, similarity_score, source_info, created_time, last_modified_time FROM group_metadata")
        self._metadata = {}
        for key, reason, score, source, created, modified in c.fetchall():
            self._metadata[key] = GroupMetadata(
                reason=reason or "",
                similarity_score=score if score is not None else 0.0,
                source_info=source,
                created_time=datetime.fromisoformat(created) if created else datetime.now(),
                last_modified_time=datetime.fromisoformat(modified) if modified else datetime.now(),
            )

        self._cache = None
        logger.debug(f"Registry loaded {len(self._decisions)} decisions, {len(self._metadata)} metadata records.")

    def _execute(self, group_key: str, sql: str, params: tuple):
        if not self.conn:
            raise RegistrySaveError("Registry database is closed", group_key=group_key)
        try:
            self.conn.execute(sql, params)
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            logger.error(f"Registry write failed for '{group_key}': {e}")
            raise RegistrySaveError(f"Registry write failed: {e}", group_key=group_key) from e

    def close(self):
        if self.conn:
            self.conn.close()
            self.conn = None

    @staticmethod
    def _decision_problem(group_key: str, selected: str) -> Optional[str]:
        """Why a stored decision cannot be used, or None if it is valid."""
        members = split_group_key(group_key)
        if len(members) < 2 or any(not m for m in members) or make_group_key(members) != group_key:
            return "malformed group key"
        if selected not in members:
            return f"'{selected}' is not a member"
        return None

    @staticmethod
    def _group_key(members: Iterable[str]) -> str:
        members = list(members)
        for text in members:
            validate_key(text)
        return make_group_key(members)

    # =========================================================================
    # GROUP DECISIONS
    # =========================================================================

    def get_status(self, members: Iterable[str]) -> Tuple[Optional[str], bool]:
        """
        Returns:
            (selected_text, is_accepted); a group without a decision is accepted as distinct
        """
        selected = self._decisions.get(make_group_key(members))
        return selected, selected is None

    def set_status(self, members: Iterable[str], selected_text: Optional[str]):
        """Persist a canonical selection, or revert to accepted-as-distinct when it is None or not a member."""
        members = list(members)
        group_key = self._group_key(members)

        with self._lock:
            if selected_text is not None and selected_text in members:
                self._execute(group_key,
                              "INSERT OR REPLACE INTO group_decisions (group_key, selected_text) VALUES (?, ?)",
                              (group_key, selected_text))
                self._decisions[group_key] = selected_text
                logger.debug(f"Group decision set: '{group_key}' -> '{selected_text}'")
            else:
                if selected_text is not None:
                    logger.warning(f"Selected text '{selected_text}' is not a member of '{group_key}'; clearing decision")
                self._remove_decision(group_key)
            self._cache = None

    def clear_status(self, members: Iterable[str]):
        group_key = make_group_key(members)
        with self._lock:
            self._remove_decision(group_key)
            self._cache = None

    def _remove_decision(self, group_key: str):
        if group_key in self._decisions:
            self._execute(group_key, "DELETE FROM group_decisions WHERE group_key = ?", (group_key,))
            del self._decisions[group_key]
            logger.debug(f"Group decision cleared: '{group_key}'")

    def decisions(self) -> Dict[str, str]:
        return dict(self._decisions)

    def metadata(self) -> Dict[str, GroupMetadata]:
        return dict(self._metadata)

    # =========================================================================
    # CANONICAL CACHE
    # =========================================================================

    def _rebuild_cache(self) -> CanonicalCache:
        text_to_group_key: Dict[str, str] = {}
        canonical: Dict[str, str] = {}

        for group_key in sorted(self._decisions):
            selected = self._decisions[group_key]
            members = split_group_key(group_key)

            problem = self._decision_problem(group_key, selected)
            if problem:
                logger.warning(f"Ignoring decision for '{group_key}': {problem}")
                continue

            for text in members:
                if text in text_to_group_key:
                    logger.warning(f"'{text}' belongs to '{text_to_group_key[text]}' and '{group_key}'; keeping the first")
                    continue
                text_to_group_key[text] = group_key
                canonical[text] = selected

        # Follow selections claimed by an earlier group so every canonical text maps to itself
        for text in list(canonical):
            target = canonical[text]
            visited = {text}
            while canonical.get(target, target) != target and target not in visited:
                visited.add(target)
                target = canonical[target]
            canonical[text] = target

        return CanonicalCache(MappingProxyType(text_to_group_key), MappingProxyType(canonical))

    def _current_cache(self) -> Optional[CanonicalCache]:
        cache = self._cache
        if cache is None and self._decisions:
            with self._lock:
                if self._cache is None:
                    self._cache = self._rebuild_cache()
                    logger.debug(f"Canonical cache rebuilt with {len(self._cache)} entries.")
                cache = self._cache
        return cache

    def get_canonical(self, text: str) -> str:
        """Canonical text for a grouped key; any other key is its own canonical form."""
        cache = self._current_cache()
        if cache is None:
            return text
        return cache.canonical_text.get(text, text)

    def get_group_key(self, text: str) -> Optional[str]:
        cache = self._current_cache()
        if cache is None:
            return None
        return cache.text_to_group_key.get(text)

    def has_different_canonical_version(self, text: str) -> bool:
        return self.get_canonical(text) != text

    def get_all_grouped_texts(self) -> List[List[str]]:
        cache = self._current_cache()
        if cache is None:
            return []
        groups: Dict[str, List[str]] = {}
        for text, group_key in cache.text_to_group_key.items():
            groups.setdefault(group_key, []).append(text)
        return list(groups.values())

    # =========================================================================
    # GROUP METADATA
    # =========================================================================

    def set_metadata(self, members: Iterable[str], reason: str, similarity_score: float,
                     source_info: Optional[str] = None):
        group_key = self._group_key(members)
        now = datetime.now()

        with self._lock:
            existing = self._metadata.get(group_key)
            metadata = GroupMetadata(
                reason=reason,
                similarity_score=similarity_score,
                source_info=source_info,
                created_time=existing.created_time if existing else now,
                last_modified_time=now,
            )
            self._execute(group_key, """
                INSERT OR REPLACE INTO group_metadata
                (group_key, reason, similarity_score, source_info, created_time, last_modified_time)
                VALUES (?, ?, ?, ?, ?, ?)
            """, (group_key, reason, similarity_score, source_info,
                  metadata.created_time.isoformat(), metadata.last_modified_time.isoformat()))
            self._metadata[group_key] = metadata

    def get_metadata(self, members: Iterable[str]) -> Optional[GroupMetadata]:
        return self._metadata.get(make_group_key(members))

    def clear_metadata(self, members: Iterable[str]):
        group_key = make_group_key(members)
        with self._lock:
            if group_key in self._metadata:
                self._execute(group_key, "DELETE FROM group_metadata WHERE group_key = ?", (group_key,))
                del self._metadata[group_key]

    def __repr__(self) -> str:
        return f"CanonicalRegistry(db_path={self.db_path!r}, decisions={len(self._decisions)})"
