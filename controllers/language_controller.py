# -*- coding: utf-8 -*-
"""
LocForge Language Controller

Handles switching the runtime language:
- Background loading of LanguageData files on the thread pool
- Superseded loads are discarded by generation
- Persisting the chosen language to settings and restoring it at startup
"""

from pathlib import Path
from typing import Dict, Optional

from PySide6.QtCore import QObject, Signal, QRunnable, Slot, QThreadPool

import locforge_config as config
from locforge_exceptions import LanguageLoadError, UnsupportedLanguageError
from locforge_logger import get_logger
from core.key_resolver import KeyResolver
from core.language_data import TranslationCatalog, TranslationTable, language_file_path, load_language_file
from models.settings_model import SettingsModel

logger = get_logger("controllers.language")


# =============================================================================
# WORKER CLASSES
# =============================================================================

class LanguageLoadWorkerSignals(QObject):
    """Signals for the LanguageLoadWorker."""
    loaded = Signal(int, str, object)  # generation, language, TranslationTable
    failed = Signal(int, str, str)  # generation, language, message


class LanguageLoadWorker(QRunnable):
    """Background worker reading one LanguageData file."""

    def __init__(self, generation: int, language: str, file_path: Path, catalog: TranslationCatalog):
        super().__init__()
        self.generation = generation
        self.language = language
        self.file_path = file_path
        self.catalog = catalog
        self.signals = LanguageLoadWorkerSignals()

    @Slot()
    def run(self):
        logger.debug(f"[LanguageLoadWorker] Loading '{self.language}' from {self.file_path} (generation {self.generation})")
        try:
            table = load_language_file(self.file_path, self.catalog, self.language)
        except LanguageLoadError as e:
            self.signals.failed.emit(self.generation, self.language, str(e))
            return
        except Exception as e:
            logger.exception(f"[LanguageLoadWorker] Unexpected error loading '{self.language}'")
            self.signals.failed.emit(self.generation, self.language, f"Unexpected error: {e}")
            return

        self.signals.loaded.emit(self.generation, self.language, table)


# =============================================================================
# CONTROLLER
# =============================================================================

class LanguageController(QObject):
    """
    Controller for the active runtime language.

    Signals:
        language_changed(str): New language is active with its table loaded
        language_load_failed(str, str): Language, error message
        loading_started(str): A background load began for the language
    """

    language_changed = Signal(str)
    language_load_failed = Signal(str, str)
    loading_started = Signal(str)

    def __init__(self, resolver: KeyResolver, languages_dir=None,
                 settings: Optional[SettingsModel] = None,
                 thread_pool: Optional[QThreadPool] = None, parent=None):
        super().__init__(parent)
        self.resolver = resolver
        self.catalog = resolver.catalog
        self.languages_dir = Path(languages_dir) if languages_dir else config.LANGUAGES_DIR
        self.settings = settings if settings is not None else SettingsModel.instance()
        self.thread_pool = thread_pool or QThreadPool.globalInstance()

        self._generation = 0
        self._pending_language: Optional[str] = None
        # Keep workers (and their signal objects) alive until they report back
        self._workers: Dict[int, LanguageLoadWorker] = {}

        logger.debug("LanguageController initialized")

    @property
    def current_language(self) -> str:
        return self.resolver.current_language

    @property
    def is_loading(self) -> bool:
        return self._pending_language is not None

    def language_file(self, language: str) -> Path:
        return language_file_path(self.languages_dir, language)

    def _check_supported(self, language: str):
        if not self.catalog.is_supported(language):
            raise UnsupportedLanguageError(f"Language '{language}' is not supported", language=language)

    def _persist(self, language: str):
        self.settings.current_language = language

    # =========================================================================
    # SWITCHING
    # =========================================================================

    def change_language(self, language: str) -> bool:
        """
        Switch the active language.

        Returns:
            False if the language is not supported, True otherwise.
            For non-default languages the switch completes asynchronously,
            signalled by language_changed or language_load_failed.
        """
        try:
            self._check_supported(language)
        except UnsupportedLanguageError as e:
            logger.error(str(e))
            return False

        snapshot = self.resolver.snapshot
        if language == snapshot.language:
            if language == self._pending_language:
                return True
            if language == self.resolver.default_language or snapshot.is_loaded:
                return True

        self._generation += 1
        generation = self._generation

        if language == self.resolver.default_language:
            self._pending_language = None
            self.resolver.activate(language)
            self._persist(language)
            logger.info(f"Language changed to default '{language}'")
            self.language_changed.emit(language)
            return True

        self._pending_language = language
        self.resolver.activate(language, None)
        self.loading_started.emit(language)

        worker = LanguageLoadWorker(generation, language, self.language_file(language), self.catalog)
        worker.signals.loaded.connect(self._on_language_loaded)
        worker.signals.failed.connect(self._on_language_failed)
        self._workers[generation] = worker
        self.thread_pool.start(worker)

        logger.info(f"Loading language '{language}' (generation {generation})")
        return True

    def restore_language(self, blocking: bool = False) -> bool:
        """
        Switch to the language saved in settings.

        With blocking=True the load runs on the calling thread and the saved
        value is left untouched. Returns False if the saved language is not
        supported by the catalog.
        """
        language = self.settings.current_language
        if not self.catalog.is_supported(language):
            logger.warning(f"Saved language '{language}' is not supported, keeping '{self.current_language}'")
            return False

        logger.debug(f"Restoring saved language '{language}'")
        if blocking:
            self.load_language_blocking(language, persist=False)
            return True
        return self.change_language(language)

    def load_language_blocking(self, language: str, persist: bool = True) -> Optional[TranslationTable]:
        """
        Load and activate a language on the calling thread.

        Args:
            language: Language to activate
            persist: Write the language to settings on success

        Returns:
            The loaded table, or None for the default language.

        Raises:
            UnsupportedLanguageError, LanguageLoadError
        """
        self._check_supported(language)

        # Anything still in flight is now stale
        self._generation += 1
        self._pending_language = None

        if language == self.resolver.default_language:
            self.resolver.activate(language)
            if persist:
                self._persist(language)
            return None

        try:
            table = load_language_file(self.language_file(language), self.catalog, language)
        except LanguageLoadError:
            self.resolver.activate(language, None)
            raise

        self.resolver.activate(language, table)
        if persist:
            self._persist(language)
        logger.info(f"Language changed to '{language}' ({len(table)} entries)")
        return table

    # =========================================================================
    # WORKER CALLBACKS
    # =========================================================================

    @Slot(int, str, object)
    def _on_language_loaded(self, generation: int, language: str, table: TranslationTable):
        self._workers.pop(generation, None)
        if generation != self._generation:
            logger.debug(f"Discarding stale load of '{language}' (generation {generation})")
            return

        self._pending_language = None
        self.resolver.activate(language, table)
        self._persist(language)
        logger.info(f"Language changed to '{language}' ({len(table)} entries)")
        self.language_changed.emit(language)

    @Slot(int, str, str)
    def _on_language_failed(self, generation: int, language: str, message: str):
        self._workers.pop(generation, None)
        if generation != self._generation:
            logger.debug(f"Ignoring failure of stale load of '{language}' (generation {generation})")
            return

        self._pending_language = None
        # Not loaded: translate() passes default-language text through
        self.resolver.activate(language, None)
        logger.error(f"Failed to load language '{language}': {message}")
        self.language_load_failed.emit(language, message)
