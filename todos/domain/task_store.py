import logging
from typing import Iterable, Iterator, Optional
from todos.domain.task import TaskRecord, TaskId
from todos.domain.enums import TaskStatus

log = logging.getLogger(__name__)

### COMMENTS
# ==========================================================
# Lokalna kolekcja zadań (domain/task_store.py).
# ==========================================================
# - Kolejność listy = kolejność wyświetlania (najnowsze na początku).
# - Brak wiedzy o sieci: store zmienia się dopiero po potwierdzeniu serwera.
# - `task_id` jest unikalny w całej kolekcji.
# - `replace_one` / `remove` na nieistniejącym ID to no-op (zwraca False):
#   źródłem prawdy jest serwer, lokalny stan może chwilowo się rozjechać.


class TaskStore:
    """
    Uporządkowana kolekcja `TaskRecord` + liczniki pochodne.

    :param initial: Opcjonalne rekordy startowe (jak po `replace_all`).
    """
    def __init__(self, initial: Iterable[TaskRecord] | None = None) -> None:
        self._items: list[TaskRecord] = []
        if initial is not None:
            self.replace_all(initial)

    def replace_all(self, records: Iterable[TaskRecord]) -> None:
        """
            Podmienia całą zawartość na listę pobraną z serwera (bez scalania).

            - Kolejność zachowana tak, jak przyszła.
            - Duplikaty ID: obowiązuje pierwsze wystąpienie, kolejne są pomijane.
        """
        items: list[TaskRecord] = []
        seen: set[TaskId] = set()
        for record in records:
            if record.task_id in seen:
                log.warning("duplicate task_id %s in fetched list, keeping first", record.task_id)
                continue
            seen.add(record.task_id)
            items.append(record)
        self._items = items

    def prepend(self, record: TaskRecord) -> None:
        """Wstawia rekord na początek (newest-first). Istniejący wpis o tym ID jest przenoszony."""
        self._items = [record] + [t for t in self._items if t.task_id != record.task_id]

    def replace_one(self, task_id: TaskId, record: TaskRecord) -> bool:
        """
            Podmienia rekord o `task_id` w miejscu (pozycja bez zmian).

            :return: False, gdy `task_id` nie ma w kolekcji (nic się nie dzieje).
        """
        for index, current in enumerate(self._items):
            if current.task_id == task_id:
                break
        else:
            return False

        items = list(self._items)
        items[index] = record
        if record.task_id != task_id:
            items = [t for i, t in enumerate(items) if i == index or t.task_id != record.task_id]
        self._items = items
        return True

    def remove(self, task_id: TaskId) -> bool:
        """Usuwa rekord; pozostałe zachowują względną kolejność. False, gdy brak ID."""
        items = [t for t in self._items if t.task_id != task_id]
        if len(items) == len(self._items):
            return False
        self._items = items
        return True

    def get(self, task_id: TaskId) -> Optional[TaskRecord]:
        for task in self._items:
            if task.task_id == task_id:
                return task
        return None

    @property
    def items(self) -> tuple[TaskRecord, ...]:
        return tuple(self._items)

    @property
    def pending_count(self) -> int:
        return sum(1 for t in self._items if t.status == TaskStatus.PENDING)

    @property
    def completed_count(self) -> int:
        return sum(1 for t in self._items if t.status == TaskStatus.COMPLETED)

    @property
    def total_count(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[TaskRecord]:
        return iter(tuple(self._items))

    def __contains__(self, task_id: object) -> bool:
        return any(t.task_id == task_id for t in self._items)
