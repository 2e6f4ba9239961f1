"""Staging area for pre-mutation backups under <project_root>/.remediation/staging."""

import logging
from pathlib import Path

from module_steward.domain.constants import BACKUP_SUFFIX, DEFAULT_STAGING_DIR
from module_steward.domain.protocols import FileSystemProtocol, StagingAreaProtocol

logger = logging.getLogger(__name__)


class StagingAreaGateway(StagingAreaProtocol):
    """
    Mirrors each backed-up file's project-relative path with a .bak suffix.

    Keys derive from the full relative path, so two attempts touching
    different files never collide even when the file names are equal.
    """

    def __init__(
        self,
        project_root: str,
        filesystem: FileSystemProtocol,
        staging_dir: str = DEFAULT_STAGING_DIR,
    ) -> None:
        self._root = Path(project_root).resolve()
        self._fs = filesystem
        self._staging = self._root / staging_dir

    @property
    def staging_root(self) -> Path:
        return self._staging

    def relative_key(self, file_path: str) -> str:
        """Project-relative POSIX path of file_path; absolute path when outside the root."""
        resolved = Path(file_path).resolve()
        try:
            return resolved.relative_to(self._root).as_posix()
        except ValueError:
            return resolved.as_posix().lstrip("/")

    def _backup_path(self, file_path: str) -> Path:
        return self._staging / f"{self.relative_key(file_path)}{BACKUP_SUFFIX}"

    def backup(self, file_path: str) -> str:
        target = self._backup_path(file_path)
        self._fs.copy_file(file_path, str(target))
        logger.debug("Staged %s -> %s", file_path, target)
        return str(target)

    def restore(self, file_path: str) -> None:
        target = self._backup_path(file_path)
        self._fs.move_file(str(target), file_path)
        self._fs.remove_empty_dirs(str(target.parent), str(self._staging))

    def discard(self, file_path: str) -> None:
        target = self._backup_path(file_path)
        self._fs.delete_file(str(target))
        self._fs.remove_empty_dirs(str(target.parent), str(self._staging))

    def has_backup(self, file_path: str) -> bool:
        return self._fs.exists(str(self._backup_path(file_path)))

    def purge(self) -> bool:
        """Drop the staging tree once no backups remain in it."""
        if not self._staging.exists():
            return True
        if any(p.is_file() for p in self._staging.rglob("*")):
            logger.warning("Staging area %s still holds backups; not purged", self._staging)
            return False
        for directory in sorted(self._staging.rglob("*"), key=lambda p: len(p.parts), reverse=True):
            directory.rmdir()
        self._staging.rmdir()
        self._fs.remove_empty_dirs(str(self._staging.parent), str(self._root))
        return True
