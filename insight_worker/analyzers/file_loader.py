from pathlib import Path

from insight_worker.analyzers.exceptions import InvalidPayloadError


class FileLoader:
    """Resolves a payload path under the files root and reads its bytes."""

    FILES_ROOT = Path("/app/files")

    def __init__(self, files_root: Path | None = None) -> None:
        self._files_root = files_root if files_root is not None else self.FILES_ROOT

    def resolve(self, relative_path: str) -> Path:
        """Return the absolute path for a payload path.

        Raises:
            InvalidPayloadError: if the path escapes the files root.
        """
        path = Path(relative_path)
        if not path.is_absolute():
            path = self._files_root / path
        resolved = path.resolve()
        if not resolved.is_relative_to(self._files_root.resolve()):
            raise InvalidPayloadError(f"Path outside files root: {relative_path}")
        return resolved

    def load(self, relative_path: str) -> bytes:
        """Read file bytes from disk.

        Raises:
            InvalidPayloadError: if the file does not exist or cannot be read.
        """
        path = self.resolve(relative_path)
        if not path.is_file():
            raise InvalidPayloadError(f"File not found: {path}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise InvalidPayloadError(f"Failed to read {path}: {exc}") from exc
