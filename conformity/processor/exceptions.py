class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class DocumentNotFoundError(ProcessorError):
    """Raised when a document cannot be found at its file reference."""


class UnsupportedStorageDiskError(ProcessorError):
    """Raised when a file reference points at an unsupported storage backend."""


class FileReadError(ProcessorError):
    """Raised when a file cannot be read from disk."""


class JobNotFoundError(ProcessorError):
    """Raised when a job id does not exist."""
