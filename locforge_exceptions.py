# -*- coding: utf-8 -*-
"""
LocForge Exceptions Module
Custom exception classes for structured error handling across the toolkit.
"""


class LocForgeError(Exception):
    """
    Base exception class for all LocForge-related errors.

    Attributes:
        message: Human-readable error message
        details: Optional additional details (dict, string, etc.)
    """

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# Detection Exceptions
# =============================================================================

class DetectionError(LocForgeError):
    """Base exception for similarity detection errors."""
    pass


class KeyValidationError(DetectionError):
    """Raised when a key cannot take part in a similarity group."""

    def __init__(self, message: str, key: str = None, delimiter: str = None):
        super().__init__(message, details={'key': key, 'delimiter': delimiter})
        self.key = key
        self.delimiter = delimiter


# =============================================================================
# Registry Exceptions
# =============================================================================

class RegistryError(LocForgeError):
    """Base exception for canonical registry errors."""
    pass


class RegistryLoadError(RegistryError):
    """Raised when the registry database cannot be opened or read."""

    def __init__(self, message: str, db_path: str = None):
        super().__init__(message, details={'db_path': db_path})
        self.db_path = db_path


class RegistrySaveError(RegistryError):
    """Raised when a registry write fails."""

    def __init__(self, message: str, group_key: str = None):
        super().__init__(message, details={'group_key': group_key})
        self.group_key = group_key


# =============================================================================
# Catalog / Language Exceptions
# =============================================================================

class CatalogError(LocForgeError):
    """Raised when catalog or translation table data is inconsistent."""

    def __init__(self, message: str, file_path: str = None):
        super().__init__(message, details={'file_path': file_path} if file_path else None)
        self.file_path = file_path


class LanguageError(LocForgeError):
    """Base exception for language selection errors."""
    pass


class UnsupportedLanguageError(LanguageError):
    """Raised when a language is not in the catalog's supported list."""

    def __init__(self, message: str, language: str = None):
        super().__init__(message, details={'language': language})
        self.language = language


class LanguageLoadError(LanguageError):
    """Raised when a translation table cannot be loaded."""

    def __init__(self, message: str, language: str = None, file_path: str = None):
        super().__init__(message, details={'language': language, 'file_path': file_path})
        self.language = language
        self.file_path = file_path


# =============================================================================
# Settings Exceptions
# =============================================================================

class SettingsError(LocForgeError):
    """Base exception for settings-related errors."""
    pass


class ValidationError(SettingsError):
    """Raised when a setting value fails validation."""

    def __init__(self, message: str, field: str = None, value=None):
        super().__init__(message, details={'field': field, 'value': value})
        self.field = field
        self.value = value
