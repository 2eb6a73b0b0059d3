"""
Pluggable storage backends for graph states.

Storage is an opaque key-value contract keyed by project id. Writes are
last-writer-wins: the backends do not version or lock states across
read-modify-write cycles.
"""

import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote, unquote

from ....shared import get_logger
from ....shared.config.settings import Settings, get_settings
from ....shared.exceptions import SchemaError, StorageError
from ....shared.models import GraphState
from ..schema import validate_state


class StorageBackend(ABC):
    """Abstract base class for graph state storage backends."""

    name = "abstract"

    @abstractmethod
    def load(self, project_id: str) -> Optional[GraphState]:
        """
        Retrieve a project's graph, or None when it has none.

        Raises:
            StorageError: a stored graph exists but cannot be read
        """
        pass

    @abstractmethod
    def save(self, project_id: str, state: GraphState) -> None:
        """Store a project's graph, replacing any previous one."""
        pass

    @abstractmethod
    def delete(self, project_id: str) -> bool:
        """Delete a project's graph. Returns whether one existed."""
        pass

    @abstractmethod
    def list_projects(self) -> List[str]:
        """List project ids that have a stored graph."""
        pass

    def get_stats(self) -> Dict[str, Any]:
        """Get storage statistics."""
        return {'backend': self.name, 'projects': len(self.list_projects())}

    @staticmethod
    def _serialize(state: GraphState) -> str:
        return json.dumps(state.to_json_dict())

    @staticmethod
    def _deserialize(data: str) -> GraphState:
        return validate_state(json.loads(data))


class InMemoryStorage(StorageBackend):
    """
    In-memory storage backend for development and testing.

    States are kept serialized, so callers never share objects with the store.
    Nothing persists between restarts.
    """

    name = "memory"

    def __init__(self):
        """Initialize in-memory storage."""
        self.logger = get_logger(__name__)
        self._lock = threading.RLock()
        self._states: Dict[str, str] = {}

        self.logger.info("Initialized InMemoryStorage backend")

    def load(self, project_id: str) -> Optional[GraphState]:
        with self._lock:
            data = self._states.get(project_id)
        if data is None:
            return None
        return self._deserialize(data)

    def save(self, project_id: str, state: GraphState) -> None:
        try:
            data = self._serialize(state)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Failed to serialize graph for {project_id}: {e}") from e

        with self._lock:
            self._states[project_id] = data
        self.logger.debug(f"Stored graph for project: {project_id}")

    def delete(self, project_id: str) -> bool:
        with self._lock:
            existed = self._states.pop(project_id, None) is not None
        if existed:
            self.logger.debug(f"Deleted graph for project: {project_id}")
        return existed

    def list_projects(self) -> List[str]:
        with self._lock:
            return sorted(self._states)


class FileStorage(StorageBackend):
    """
    JSON file storage backend, one ``<project_id>.json`` per project.

    Project ids are percent-encoded into file names, so distinct ids never
    share a file and ``list_projects`` returns the ids as they were saved.

    Writes go through a temporary file and an atomic rename, so a failed save
    never leaves a half-written graph behind.
    """

    name = "file"

    def __init__(self, data_dir: Union[str, Path]):
        """
        Initialize file storage.

        Args:
            data_dir: Directory holding one JSON file per project
        """
        self.logger = get_logger(__name__)
        self._lock = threading.RLock()
        self.data_dir = Path(data_dir)

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self.data_dir}: {e}") from e

        self.logger.info(f"Initialized FileStorage backend at {self.data_dir}")

    def _path_for(self, project_id: str) -> Path:
        file_name = quote(project_id, safe='')
        # Never start a file name with a dot
        if file_name.startswith('.'):
            file_name = '%2E' + file_name[1:]
        return self.data_dir / f"{file_name}.json"

    def load(self, project_id: str) -> Optional[GraphState]:
        path = self._path_for(project_id)
        with self._lock:
            if not path.exists():
                return None
            try:
                data = path.read_text(encoding='utf-8')
            except OSError as e:
                raise StorageError(f"Failed to read graph for {project_id}: {e}") from e

        try:
            return self._deserialize(data)
        except (json.JSONDecodeError, SchemaError) as e:
            # Corrupt files are never reported as missing
            self.logger.error(f"Stored graph for {project_id} at {path} is unreadable: {e}")
            raise StorageError(f"Stored graph for {project_id} is unreadable: {e}") from e

    def save(self, project_id: str, state: GraphState) -> None:
        path = self._path_for(project_id)
        data = self._serialize(state)

        with self._lock:
            tmp_name = None
            try:
                with tempfile.NamedTemporaryFile(
                    'w', encoding='utf-8', dir=self.data_dir,
                    prefix=f".{path.stem}.", suffix='.tmp', delete=False
                ) as tmp:
                    tmp_name = tmp.name
                    tmp.write(data)
                os.replace(tmp_name, path)
            except OSError as e:
                if tmp_name and os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                self.logger.error(f"Failed to store graph for {project_id}: {e}")
                raise StorageError(f"Failed to save graph for {project_id}: {e}") from e

        self.logger.debug(f"Stored graph for project {project_id} at {path}")

    def delete(self, project_id: str) -> bool:
        path = self._path_for(project_id)
        with self._lock:
            if not path.exists():
                return False
            try:
                path.unlink()
            except OSError as e:
                raise StorageError(f"Failed to delete graph for {project_id}: {e}") from e
        self.logger.debug(f"Deleted graph for project: {project_id}")
        return True

    def list_projects(self) -> List[str]:
        with self._lock:
            return sorted(unquote(p.stem) for p in self.data_dir.glob('*.json'))

    def get_stats(self) -> Dict[str, Any]:
        stats = super().get_stats()
        stats['data_dir'] = str(self.data_dir)
        return stats


def create_storage_backend(settings: Optional[Settings] = None) -> StorageBackend:
    """Build the backend named by ``settings.storage_backend``."""
    settings = settings or get_settings()

    if settings.storage_backend == "file":
        return FileStorage(settings.data_dir)
    return InMemoryStorage()
