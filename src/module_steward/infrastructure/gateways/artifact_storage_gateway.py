"""Local artifact storage for run records under the report directory."""

from module_steward.domain.protocols import ArtifactStorageProtocol, FileSystemProtocol


class LocalArtifactStorage(ArtifactStorageProtocol):
    """Stores run records under a base path. Keys look like last_run.json or history.ndjson."""

    def __init__(self, base_path: str, filesystem: FileSystemProtocol) -> None:
        self._base = base_path
        self._fs = filesystem

    @property
    def base_path(self) -> str:
        return self._base

    def _path(self, key: str) -> str:
        return self._fs.join_path(self._base, key)

    def _prepare(self, key: str) -> str:
        normalized = key.replace("\\", "/")
        if "/" in normalized:
            self._fs.make_dirs(self._fs.join_path(self._base, normalized.rsplit("/", 1)[0]))
        else:
            self._fs.make_dirs(self._base)
        return self._path(normalized)

    def write_artifact(self, key: str, content: str, encoding: str = "utf-8") -> None:
        self._fs.write_text(self._prepare(key), content, encoding=encoding)

    def read_artifact(self, key: str, encoding: str = "utf-8") -> str:
        """Raises when the artifact is missing."""
        return self._fs.read_text(self._path(key), encoding=encoding)

    def exists(self, key: str) -> bool:
        return self._fs.exists(self._path(key))

    def append_artifact(self, key: str, content: str, encoding: str = "utf-8") -> None:
        """Append (e.g. one NDJSON line); creates the artifact if missing."""
        self._fs.append_text(self._prepare(key), content, encoding=encoding)
