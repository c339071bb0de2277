"""
Error taxonomy for the classification service
Every failure the core raises is a ClassifyError subclass
"""

from typing import Optional


class ClassifyError(Exception):
    """Base class for all service errors"""
    kind = "Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class ConfigError(ClassifyError):
    kind = "Configuration error"


class StorageError(ClassifyError):
    """Backend I/O failure, wrapped with the backend and operation that failed"""
    kind = "Storage error"

    def __init__(self, message: str, backend: Optional[str] = None, operation: Optional[str] = None):
        if backend and operation:
            message = f"{backend}.{operation} failed: {message}"
        super().__init__(message)
        self.backend = backend
        self.operation = operation


class StorageTimeoutError(StorageError):
    kind = "Storage timeout"


class ClassificationError(ClassifyError):
    kind = "Classification error"


class ClassifierTimeoutError(ClassificationError):
    kind = "Classification timeout"


class UrlError(ClassifyError):
    kind = "URL error"


class HttpError(ClassifyError):
    kind = "HTTP error"


class SerializationError(ClassifyError):
    kind = "Serialization error"


class InvalidContentError(ClassifyError):
    kind = "Invalid content"
