import logging
from dataclasses import dataclass
from todos.ports.sync_client import SyncClient
from todos.domain.task import TaskRecord, TaskId, TaskChanges
from todos.domain.task_store import TaskStore
from todos.domain.edit_session import EditSession
from todos.domain.enums import TaskFilter, TaskStatus
from todos.domain.errors import SyncError

log = logging.getLogger(__name__)

FETCH_FAILED = "Failed to fetch todos"
SAVE_FAILED = "Failed to save todo"
UPDATE_FAILED = "Failed to update todo"
DELETE_FAILED = "Failed to delete todo"


### COMMENTS
# ==========================================================
# Warstwa serwisowa (services/view_controller.py): orkiestracja widoku zadań.
# ==========================================================
# Rola:
# - Jedyne miejsce, które woła SyncClient i zmienia TaskStore / EditSession.
# - Każda akcja = dokładnie jedno wywołanie zdalne; lokalny stan zmienia się
#   dopiero po sukcesie (pessimistic update, brak rollbacku).
#
# Błędy:
# - Slot `error` trzyma ostatni komunikat porażki. Czyszczony wyłącznie na starcie
#   `on_submit`, więc przetrwa udane toggle/delete/fetch.
# - Niezależnie od slotu każda operacja zwraca `Outcome` dla wywołującego.
#
# Współbieżność (jedna pętla asyncio):
# - fetch: licznik generacji, odpowiedź nieaktualnej generacji jest odrzucana.
# - submit: flaga `busy`, drugi submit w trakcie jest pomijany.
# - toggle/delete: zbiór ID "w locie", powtórzenie dla tego samego ID jest pomijane.


@dataclass(frozen=True)
class Outcome:
    """Wynik pojedynczej operacji kontrolera."""
    ok: bool
    record: TaskRecord | None = None
    error: str | None = None
    skipped: bool = False

    @classmethod
    def success(cls, record: TaskRecord | None = None) -> "Outcome":
        return cls(ok=True, record=record)

    @classmethod
    def failure(cls, error: str) -> "Outcome":
        return cls(ok=False, error=error)

    @classmethod
    def skip(cls) -> "Outcome":
        return cls(ok=False, skipped=True)


class ViewController:
    """
    Kontroler widoku listy zadań.

    :param client: Implementacja portu SyncClient.
    :param store: Lokalna kolekcja (domyślnie pusta).
    :param session: Sesja edycji (domyślnie tryb tworzenia).
    :param task_filter: Filtr startowy.
    """
    def __init__(
        self,
        client: SyncClient,
        store: TaskStore | None = None,
        session: EditSession | None = None,
        task_filter: TaskFilter = TaskFilter.ALL,
    ) -> None:
        self.client = client
        self.store = store if store is not None else TaskStore()
        self.session = session if session is not None else EditSession()
        self.filter = TaskFilter(task_filter)
        self.error: str | None = None
        self.busy = False
        self._generation = 0
        self._in_flight: set[TaskId] = set()

    # --- fetch ---

    async def load(self) -> Outcome:
        """Pobiera listę dla bieżącego filtra (pierwsze wyświetlenie widoku)."""
        return await self.on_filter_change(self.filter)

    async def on_filter_change(self, new_filter: TaskFilter) -> Outcome:
        """
            Ustawia filtr i pobiera pasujący podzbiór z serwera.

            - Sukces: `store.replace_all(wynik)`.
            - Porażka: `error = FETCH_FAILED`, store bez zmian (stare dane zostają).
            - Odpowiedź wyprzedzona przez nowszy fetch jest odrzucana (`Outcome.skip()`).
        """
        self.filter = TaskFilter(new_filter)
        self._generation += 1
        generation = self._generation
        log.debug("fetch #%d filter=%s", generation, self.filter)
        try:
            records = await self.client.fetch_tasks(self.filter)
        except SyncError as e:
            if generation != self._generation:
                log.debug("dropping stale fetch failure #%d", generation)
                return Outcome.skip()
            log.warning("fetch failed: %s", e)
            self.error = FETCH_FAILED
            return Outcome.failure(FETCH_FAILED)

        if generation != self._generation:
            log.debug("dropping stale fetch response #%d", generation)
            return Outcome.skip()
        self.store.replace_all(records)
        return Outcome.success()

    # --- submit (create / update) ---

    async def on_submit(self) -> Outcome:
        """
            Zapisuje formularz: aktualizacja w trybie edycji, w przeciwnym razie tworzenie.

            - Pusty (po strip) tytuł: nic się nie dzieje, bez komunikatu.
            - Sukces: store zaktualizowany, draft wyczyszczony, edycja zakończona.
            - Porażka: `error` = komunikat serwera albo SAVE_FAILED; draft zostaje.
        """
        draft = self.session.draft
        if not draft.title.strip():
            return Outcome.skip()
        if self.busy:
            log.debug("submit ignored, previous submit still running")
            return Outcome.skip()

        self.busy = True
        self.error = None
        editing_id = self.session.editing_id
        try:
            if editing_id is not None:
                record = await self.client.update_task(
                    editing_id, TaskChanges(title=draft.title, description=draft.description)
                )
                self.store.replace_one(editing_id, record)
                self.session.finish_edit()
            else:
                record = await self.client.create_task(draft.title, draft.description)
                self.store.prepend(record)
                draft.clear()
        except SyncError as e:
            log.warning("submit failed: %s", e)
            self.error = e.message or SAVE_FAILED
            return Outcome.failure(self.error)
        finally:
            self.busy = False
        return Outcome.success(record)

    # --- toggle / delete ---

    async def on_toggle_status(self, task_id: TaskId) -> Outcome:
        """Przełącza pending <-> completed; store zmienia się dopiero po odpowiedzi serwera."""
        task = self.store.get(task_id)
        if task is None or task_id in self._in_flight:
            return Outcome.skip()

        flipped = TaskStatus(task.status).flipped()
        self._in_flight.add(task_id)
        try:
            record = await self.client.update_task(task_id, TaskChanges(status=flipped))
        except SyncError as e:
            log.warning("toggle %s failed: %s", task_id, e)
            self.error = UPDATE_FAILED
            return Outcome.failure(UPDATE_FAILED)
        finally:
            self._in_flight.discard(task_id)
        self.store.replace_one(task_id, record)
        return Outcome.success(record)

    async def on_delete(self, task_id: TaskId) -> Outcome:
        """Usuwa zadanie; rekord znika z listy dopiero po potwierdzeniu serwera."""
        if task_id in self._in_flight:
            return Outcome.skip()

        self._in_flight.add(task_id)
        try:
            await self.client.delete_task(task_id)
        except SyncError as e:
            log.warning("delete %s failed: %s", task_id, e)
            self.error = DELETE_FAILED
            return Outcome.failure(DELETE_FAILED)
        finally:
            self._in_flight.discard(task_id)
        self.store.remove(task_id)
        return Outcome.success()

    # --- edit session ---

    def start_edit(self, task: TaskRecord | TaskId) -> bool:
        """Wchodzi w tryb edycji; przyjmuje rekord albo ID obecne w store."""
        if not isinstance(task, TaskRecord):
            found = self.store.get(task)
            if found is None:
                return False
            task = found
        self.session.start_edit(task)
        return True

    def cancel_edit(self) -> None:
        self.session.cancel_edit()

    # --- widok ---

    @property
    def pending_count(self) -> int:
        return self.store.pending_count

    @property
    def completed_count(self) -> int:
        return self.store.completed_count

    @property
    def total_count(self) -> int:
        return self.store.total_count

    @property
    def submit_label(self) -> str:
        if self.busy:
            return "Saving..."
        return "Update" if self.session.is_editing else "Add Todo"

    def is_pending(self, task_id: TaskId) -> bool:
        """Czy dla `task_id` trwa toggle/delete."""
        return task_id in self._in_flight
