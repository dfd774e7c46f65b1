import re
from pathlib import Path

from conformity.processor.exceptions import (
    DocumentNotFoundError,
    FileReadError,
    UnsupportedStorageDiskError,
)

_SCHEME = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*)://")
_LOCAL_SCHEMES = frozenset({"file", "local"})


class FileLoader:
    """Resolves a job's file reference on local storage and reads its bytes.

    References are either paths relative to files_root, absolute paths, or
    "local://" / "file://" URLs.
    """

    FILES_ROOT = Path("/app/files")

    def __init__(self, files_root: Path | None = None) -> None:
        self._files_root = files_root if files_root is not None else self.FILES_ROOT

    def resolve_path(self, file_reference: str) -> Path:
        """Map a file reference to a filesystem path.

        Raises:
            UnsupportedStorageDiskError: if the reference uses a remote scheme.
        """
        reference = file_reference.strip()
        scheme = _SCHEME.match(reference)
        if scheme:
            if scheme.group(1).lower() not in _LOCAL_SCHEMES:
                raise UnsupportedStorageDiskError(
                    f"storage scheme '{scheme.group(1)}' is not supported"
                )
            reference = reference[scheme.end():]
        path = Path(reference)
        return path if path.is_absolute() else self._files_root / path

    def load(self, file_reference: str) -> bytes:
        """Read document bytes from disk.

        Raises:
            DocumentNotFoundError: if the file does not exist at the resolved path.
            UnsupportedStorageDiskError: if the reference is not local.
            FileReadError: if the file exists but cannot be read.
        """
        path = self.resolve_path(file_reference)
        if not path.is_file():
            raise DocumentNotFoundError(f"PDF resource was not found at path: {path}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise FileReadError(f"Failed to read {path}: {exc}") from exc
