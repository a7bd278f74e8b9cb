"""
Task persistence: in-memory store and atomic JSON file store
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional
from pydantic import ValidationError as PydanticValidationError
from tasq.models.task import Task, ON_BOARD_STATUSES
from tasq.utils.error_handler import PersistenceWriteError, StoreCorruptedError
from tasq.utils.logger import logger


class TaskStore(ABC):
    """Keyed record store for tasks"""

    @abstractmethod
    def list_all(self) -> List[Task]:
        """All stored tasks, most recently created first"""
        ...

    @abstractmethod
    def insert(self, task: Task) -> None:
        ...

    @abstractmethod
    def replace(self, task_id: str, task: Task) -> None:
        ...

    @abstractmethod
    def remove(self, task_id: str) -> None:
        """Remove a task; removing an unknown id is a no-op"""
        ...


class InMemoryTaskStore(TaskStore):
    """Ephemeral store holding serialized records in process memory"""

    def __init__(self, tasks: Optional[List[Task]] = None):
        self.logger = logger
        self._records: Dict[str, Dict[str, Any]] = {}
        for task in tasks or []:
            self._records[task.id] = task.to_record()

    def list_all(self) -> List[Task]:
        tasks = [Task.from_record(record) for record in self._records.values()]
        # Stable sort over reversed insertion order: later inserts win ties
        return sorted(reversed(tasks), key=lambda t: t.created_at, reverse=True)

    def insert(self, task: Task) -> None:
        record = task.to_record()
        existing = self._records.get(task.id)
        if existing == record:
            return
        if existing is not None:
            self.logger.warning(f"[TaskStore] Insert of existing task {task.id}, overwriting record")
        records = dict(self._records)
        records[task.id] = record
        self._commit(records)
        self.logger.debug(f"[TaskStore] Inserted task {task.id}")

    def replace(self, task_id: str, task: Task) -> None:
        if task.id != task_id:
            raise ValueError(f"Record id mismatch: {task_id} != {task.id}")
        record = task.to_record()
        if self._records.get(task_id) == record:
            return
        records = dict(self._records)
        records[task_id] = record
        self._commit(records)
        self.logger.debug(f"[TaskStore] Replaced task {task_id}")

    def remove(self, task_id: str) -> None:
        if task_id not in self._records:
            return
        records = dict(self._records)
        del records[task_id]
        self._commit(records)
        self.logger.debug(f"[TaskStore] Removed task {task_id}")

    def _commit(self, records: Dict[str, Dict[str, Any]]) -> None:
        self._records = records


class JsonFileTaskStore(InMemoryTaskStore):
    """Durable store: one JSON object keyed by task id, rewritten atomically"""

    def __init__(self, store_file: str):
        """
        Initialize JSON file store

        Args:
            store_file: Path to the JSON file (created on first write)

        Raises:
            StoreCorruptedError: If an existing file cannot be read or parsed
        """
        super().__init__()
        self.store_file = Path(store_file)
        self._records = self._load_records()

    def _load_records(self) -> Dict[str, Dict[str, Any]]:
        """Load records from file"""
        if not self.store_file.exists():
            self.logger.info(f"[TaskStore] No store at {self.store_file}, starting empty")
            return {}

        try:
            with open(self.store_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreCorruptedError(f"Cannot read task store {self.store_file}: {e}") from e

        if not isinstance(data, dict):
            raise StoreCorruptedError(f"Task store {self.store_file} must contain a JSON object")

        for task_id, record in data.items():
            try:
                task = Task.from_record(record)
            except PydanticValidationError as e:
                raise StoreCorruptedError(f"Invalid task record '{task_id}' in {self.store_file}: {e}") from e
            if task.id != task_id:
                raise StoreCorruptedError(f"Task record key '{task_id}' does not match its id '{task.id}'")
            if task.status not in ON_BOARD_STATUSES:
                raise StoreCorruptedError(
                    f"Task record '{task_id}' has status '{task.status.value}', only board tasks are stored"
                )

        self.logger.debug(f"[TaskStore] Loaded {len(data)} tasks from {self.store_file}")
        return data

    def _commit(self, records: Dict[str, Dict[str, Any]]) -> None:
        """Write records to a temp file and atomically swap it into place"""
        tmp_path = None
        try:
            self.store_file.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.store_file.parent,
                prefix=f".{self.store_file.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp_file:
                tmp_path = tmp_file.name
                json.dump(records, tmp_file, ensure_ascii=False, indent=2)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
            os.replace(tmp_path, self.store_file)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistenceWriteError(f"Failed to write task store {self.store_file}: {e}") from e

        self._records = records
