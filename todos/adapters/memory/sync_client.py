from todos.domain.task import TaskRecord, TaskId, TaskChanges
from todos.domain.enums import TaskFilter
from todos.domain.errors import TaskNotFoundError, TaskValidationError
from todos.ports.clock import Clock
from todos.ports.id_provider import IdProvider
from todos.adapters.system.clock_system import SystemClock
from todos.adapters.system.id_provider_uuid import UuidIdProvider
from typing import Iterable

### COMMENTS
# ==========================================================
# Adapter pamięciowy zdalnego magazynu (adapters/memory/sync_client.py).
# ==========================================================
# - Zachowuje się jak serwer: nadaje ID i czas utworzenia, filtruje po statusie.
# - Służy do testów, trybu demo i domyślnego backendu CLI (brak trwałości).
# - Dane w słowniku `_data: dict[TaskId, TaskRecord]`.
# - Kolejność wyników: created_at malejąco, tiebreaker po task_id malejąco.


class InMemorySyncClient:
    """
        Magazyn zadań w pamięci procesu.

        :param id_provider: Źródło identyfikatorów (domyślnie UUID).
        :param clock: Źródło czasu (domyślnie zegar systemowy UTC).
        :param initial: Rekordy startowe; przy duplikatach ID ostatni wygrywa (to tylko seed).
    """
    def __init__(
        self,
        id_provider: IdProvider | None = None,
        clock: Clock | None = None,
        initial: Iterable[TaskRecord] | None = None,
    ) -> None:
        self.id_provider = id_provider or UuidIdProvider()
        self.clock = clock or SystemClock()
        self._data: dict[TaskId, TaskRecord] = {}
        for t in (initial or []):
            self._data[t.task_id] = t

    async def fetch_tasks(self, task_filter: TaskFilter) -> list[TaskRecord]:
        task_filter = TaskFilter(task_filter)
        tasks = [t for t in self._data.values() if task_filter.matches(t.status)]
        tasks.sort(key=lambda t: (t.created_at, t.task_id), reverse=True)
        return tasks

    async def create_task(self, title: str, description: str | None = None) -> TaskRecord:
        """
            Tworzy nowe zadanie.

            - Walidacja: `title` nie może być pusty (`TaskValidationError`).
            - Status startowy: "pending".
        """
        _check_title(title, "create")
        task = TaskRecord(
            task_id=TaskId(self.id_provider.new_id()),
            title=title,
            description=description,
            created_at=self.clock.now(),
        )
        self._data[task.task_id] = task
        return task

    async def update_task(self, task_id: TaskId, changes: TaskChanges) -> TaskRecord:
        task = self._data.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id, "update")
        if changes.title is not None:
            _check_title(changes.title, "update")
        updated = changes.apply(task)
        self._data[task_id] = updated
        return updated

    async def delete_task(self, task_id: TaskId) -> None:
        if task_id not in self._data:
            raise TaskNotFoundError(task_id, "delete")
        del self._data[task_id]

    async def aclose(self) -> None:
        return None

    def count_all(self) -> int:
        return len(self._data)


def _check_title(title: str, operation: str) -> None:
    if not title or not title.strip():
        raise TaskValidationError("title", "Title is required", operation)
