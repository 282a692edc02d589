from typing import Protocol
from todos.domain.task import TaskRecord, TaskId, TaskChanges
from todos.domain.enums import TaskFilter


### COMMENTS
# ==========================================================
# Kontrakt zdalnego magazynu zadań (ports/sync_client.py).
# ==========================================================
# - Niezależny od transportu (pamięć, SQLite, REST).
# - Każda porażka (sieć, serwer, walidacja) -> SyncError z opcjonalnym komunikatem serwera.
# - Serwer jest źródłem prawdy dla `task_id`, `created_at` i domyślnego statusu ("pending").
# - Metody są asynchroniczne: kontroler działa w jednej pętli zdarzeń asyncio.


class SyncClient(Protocol):
    """Interfejs czterech zdalnych operacji CRUD na zadaniach."""

    async def fetch_tasks(self, task_filter: TaskFilter) -> list[TaskRecord]:
        """Zwraca podzbiór zadań wybrany przez `task_filter`, od najnowszych.

        Wyjątki domenowe:
            SyncError: Gdy pobranie się nie powiodło.
        """

    async def create_task(self, title: str, description: str | None = None) -> TaskRecord:
        """Tworzy zadanie; serwer nadaje `task_id`, `created_at` i status "pending".

        Wyjątki domenowe:
            TaskValidationError: Gdy serwer odrzucił dane.
            SyncError: Każdy inny błąd.
        """

    async def update_task(self, task_id: TaskId, changes: TaskChanges) -> TaskRecord:
        """Częściowy zapis jednego zadania; zwraca rekord po zmianie.

        Wyjątki domenowe:
            TaskNotFoundError: Gdy rekord nie istnieje.
            SyncError: Każdy inny błąd.
        """

    async def delete_task(self, task_id: TaskId) -> None:
        """Usuwa (hard delete) zadanie.

        Wyjątki domenowe:
            TaskNotFoundError: Gdy rekord nie istnieje.
            SyncError: Każdy inny błąd.
        """

    async def aclose(self) -> None:
        """Zwalnia zasoby (połączenia HTTP, silnik bazy)."""
