"""Filesystem Gateway - Infrastructure implementation of FileSystemProtocol."""

import logging
import shutil
from pathlib import Path
from typing import List, Optional

from module_steward.domain.protocols import FileSystemProtocol

logger = logging.getLogger(__name__)


class FileSystemGateway(FileSystemProtocol):
    """Infrastructure implementation of FileSystemProtocol using pathlib."""

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """Read text without newline translation so CRLF descriptors round-trip."""
        with Path(path).open(encoding=encoding, newline="") as handle:
            return handle.read()

    def read_text_or_none(self, path: str) -> Optional[str]:
        """Read UTF-8 text; None when the file is missing or undecodable."""
        try:
            return self.read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Unreadable file %s: %s", path, exc)
            return None

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """Write text content to a file, creating parent directories."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps the line endings the content already carries
        with target.open("w", encoding=encoding, newline="") as handle:
            handle.write(content)

    def append_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        with Path(path).open("a", encoding=encoding) as handle:
            handle.write(content)

    def copy_file(self, source: str, destination: str) -> None:
        """Copy bytes and metadata; parent directories are created."""
        Path(destination).parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination)

    def move_file(self, source: str, destination: str) -> None:
        Path(destination).parent.mkdir(parents=True, exist_ok=True)
        shutil.move(source, destination)

    def delete_file(self, path: str) -> None:
        Path(path).unlink(missing_ok=True)

    def make_dirs(self, path: str, exist_ok: bool = True) -> None:
        """Create directory and parent directories if needed."""
        Path(path).mkdir(parents=True, exist_ok=exist_ok)

    def list_subdirectories(self, path: str) -> List[str]:
        """Names of the immediate subdirectories of path, sorted."""
        base = Path(path)
        if not base.is_dir():
            return []
        return sorted(p.name for p in base.iterdir() if p.is_dir())

    def remove_empty_dirs(self, path: str, stop_at: str) -> None:
        """Remove path and its empty ancestors up to (not including) stop_at."""
        current = Path(path).resolve()
        stop = Path(stop_at).resolve()
        while current != stop and stop in current.parents:
            try:
                current.rmdir()
            except OSError:
                return
            current = current.parent

    def join_path(self, *paths: str) -> str:
        """Join path components into a single path string."""
        return str(Path(*paths))
