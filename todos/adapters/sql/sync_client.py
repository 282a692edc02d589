from __future__ import annotations
import asyncio
import logging
import sqlalchemy as db
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool
from pathlib import Path
from datetime import datetime, timezone
from todos.domain.task import TaskRecord, TaskId, TaskChanges
from todos.domain.enums import TaskFilter, TaskStatus
from todos.domain.errors import SyncError, TaskNotFoundError, TaskValidationError
from todos.ports.clock import Clock
from todos.ports.id_provider import IdProvider
from todos.adapters.system.clock_system import SystemClock
from todos.adapters.system.id_provider_uuid import UuidIdProvider

log = logging.getLogger(__name__)


def _engine_options(db_url: str) -> dict:
    # połączenia SQLite używane z wątków roboczych asyncio.to_thread
    if not db_url.startswith("sqlite"):
        return {}
    options = {"connect_args": {"check_same_thread": False}}
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return options


class SqlSyncClient:
    """Magazyn zadań w bazie SQL (SQLAlchemy Core), np. lokalny plik SQLite.

    Zapytania są blokujące, więc idą przez `asyncio.to_thread`; pętla zdarzeń
    nie stoi w miejscu, a wywołania mogą się przeplatać jak przy zdalnym serwerze.
    """

    def __init__(
        self,
        url: str | Path,
        id_provider: IdProvider | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        url: np. 'sqlite:///data/todos.db' lub Path do pliku (zostanie zrobiony URL)
        """
        if isinstance(url, Path):
            url.parent.mkdir(parents=True, exist_ok=True)
            db_url = f"sqlite:///{url}"
        else:
            db_url = url

        self.id_provider = id_provider or UuidIdProvider()
        self.clock = clock or SystemClock()
        self.engine = db.create_engine(db_url, future=True, **_engine_options(db_url))
        self.meta = db.MetaData()

        self.tasks = db.Table(
            "todos",
            self.meta,
            db.Column("task_id", db.String, primary_key=True),
            db.Column("title", db.String, nullable=False),
            db.Column("description", db.String, nullable=True),
            db.Column("created_at", db.String, nullable=False),  # ISO8601 '...Z'
            db.Column("status", db.String, nullable=False),      # 'pending'/'completed'
        )

        # utwórz tabelę jeśli nie istnieje
        self.meta.create_all(self.engine)

    def _encode_dt(self, dt: datetime) -> str:
        # ISO 8601 w UTC z sufiksem 'Z';
        # stała szerokość (mikrosekundy zawsze obecne), bo ORDER BY porównuje tekst
        return dt.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")

    def _decode_dt(self, s: str) -> datetime:
        return datetime.fromisoformat(s.replace("Z", "+00:00")).astimezone(timezone.utc)

    def _to_row(self, task: TaskRecord) -> dict:
        return {
            'task_id': str(task.task_id),
            'title': task.title,
            'description': task.description,
            'created_at': self._encode_dt(task.created_at),
            'status': TaskStatus(task.status).value,
        }

    def _from_row(self, row) -> TaskRecord:
        try:
            status = TaskStatus(row["status"])
        except ValueError:
            status = TaskStatus.PENDING

        return TaskRecord(
            task_id=TaskId(row["task_id"]),
            title=row["title"],
            description=row["description"],
            created_at=self._decode_dt(row["created_at"]),
            status=status,
        )

    def _get(self, conn, task_id: TaskId) -> TaskRecord | None:
        stmt = db.select(self.tasks).where(self.tasks.c.task_id == str(task_id))
        row = conn.execute(stmt).mappings().first()
        return None if row is None else self._from_row(row)

    def _fetch(self, task_filter: TaskFilter) -> list[TaskRecord]:
        stmt = db.select(self.tasks).order_by(
            self.tasks.c.created_at.desc(), self.tasks.c.task_id.desc()
        )
        if task_filter is not TaskFilter.ALL:
            stmt = stmt.where(self.tasks.c.status == task_filter.value)
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
                return [self._from_row(r) for r in rows]
        except SQLAlchemyError as e:
            log.error("fetch failed: %s", e)
            raise SyncError("fetch") from e

    def _insert(self, task: TaskRecord) -> TaskRecord:
        stmt = db.insert(self.tasks).values(**self._to_row(task))
        try:
            with self.engine.begin() as conn:
                conn.execute(stmt)
        except IntegrityError as e:
            # konflikt PK
            raise SyncError("create", f"Todo {task.task_id} already exists") from e
        except SQLAlchemyError as e:
            log.error("create failed: %s", e)
            raise SyncError("create") from e
        return task

    def _update(self, task_id: TaskId, changes: TaskChanges) -> TaskRecord:
        try:
            with self.engine.begin() as conn:
                task = self._get(conn, task_id)
                if task is None:
                    raise TaskNotFoundError(task_id, "update")
                updated = changes.apply(task)
                conn.execute(
                    db.update(self.tasks)
                    .where(self.tasks.c.task_id == str(task_id))
                    .values(**self._to_row(updated))
                )
                return updated
        except SQLAlchemyError as e:
            log.error("update failed: %s", e)
            raise SyncError("update") from e

    def _delete(self, task_id: TaskId) -> None:
        stmt = db.delete(self.tasks).where(self.tasks.c.task_id == str(task_id))
        try:
            with self.engine.begin() as conn:
                result = conn.execute(stmt)
                if result.rowcount == 0:
                    raise TaskNotFoundError(task_id, "delete")
        except SQLAlchemyError as e:
            log.error("delete failed: %s", e)
            raise SyncError("delete") from e

    async def fetch_tasks(self, task_filter: TaskFilter) -> list[TaskRecord]:
        return await asyncio.to_thread(self._fetch, TaskFilter(task_filter))

    async def create_task(self, title: str, description: str | None = None) -> TaskRecord:
        if not title or not title.strip():
            raise TaskValidationError("title", "Title is required", "create")
        task = TaskRecord(
            task_id=TaskId(self.id_provider.new_id()),
            title=title,
            description=description,
            created_at=self.clock.now(),
        )
        return await asyncio.to_thread(self._insert, task)

    async def update_task(self, task_id: TaskId, changes: TaskChanges) -> TaskRecord:
        if changes.title is not None and not changes.title.strip():
            raise TaskValidationError("title", "Title is required", "update")
        return await asyncio.to_thread(self._update, task_id, changes)

    async def delete_task(self, task_id: TaskId) -> None:
        await asyncio.to_thread(self._delete, task_id)

    def count_all(self) -> int:
        stmt = db.select(db.func.count()).select_from(self.tasks)
        with self.engine.connect() as conn:
            return int(conn.execute(stmt).scalar_one())

    async def aclose(self) -> None:
        await asyncio.to_thread(self.engine.dispose)
