from typing import NewType
from datetime import datetime
from dataclasses import dataclass, replace
from todos.domain.enums import TaskStatus

TaskId = NewType("TaskId", str)

@dataclass(frozen=True)
class TaskRecord():
    """
    Model domenowy pojedynczego zadania; niemutowalny.
    `task_id` i `created_at` nadaje serwer, klient ich nigdy nie zmienia.
    """
    task_id: TaskId
    title: str
    created_at: datetime
    description: str | None = None
    status: TaskStatus = TaskStatus.PENDING


@dataclass(frozen=True)
class TaskChanges():
    """
    Częściowa aktualizacja zadania (PUT z wybranymi polami).
    `None` oznacza "pole nie jest wysyłane", pusty string to poprawna wartość opisu.
    """
    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None

    def as_payload(self) -> dict:
        payload = {}
        if self.title is not None:
            payload["title"] = self.title
        if self.description is not None:
            payload["description"] = self.description
        if self.status is not None:
            payload["status"] = TaskStatus(self.status).value
        return payload

    def apply(self, task: TaskRecord) -> TaskRecord:
        """Zwraca nową instancję `task` z nadpisanymi polami (reszta bez zmian)."""
        return replace(task, **{
            field: value
            for field, value in (
                ("title", self.title),
                ("description", self.description),
                ("status", TaskStatus(self.status) if self.status is not None else None),
            )
            if value is not None
        })


### COMMENTS
# ======================================
# TaskRecord vs TaskChanges
# ======================================
# TaskRecord to pełny obraz zadania tak, jak zwrócił go serwer.
# TaskChanges to "łatka": tylko pola, które użytkownik faktycznie zmienia.
#   - edycja formularza  -> TaskChanges(title=..., description=...)
#   - przełączenie statusu -> TaskChanges(status=...)
#
# Repozytoria (memory/sql) używają `apply`, klient HTTP wysyła `as_payload()`.
# Lokalny stan nigdy nie jest zmieniany przez `apply` po stronie klienta:
# do TaskStore trafia wyłącznie rekord odesłany przez serwer.
