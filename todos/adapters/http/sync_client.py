from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote
import httpx
from todos.domain.task import TaskRecord, TaskId, TaskChanges
from todos.domain.enums import TaskFilter, TaskStatus
from todos.domain.errors import SyncError

log = logging.getLogger(__name__)

### COMMENTS
# ==========================================================
# Klient REST zdalnego magazynu (adapters/http/sync_client.py).
# ==========================================================
#   fetch  : GET    /todos?status=all|pending|completed -> {"todos": [...]}
#   create : POST   /todos        {title, description}  -> {"todo": {...}}
#   update : PUT    /todos/{id}   {title?, description?, status?} -> {"todo": {...}}
#   delete : DELETE /todos/{id}
#
# - Błędy odpowiedzi (4xx/5xx) -> SyncError z polem "message" z ciała (jeśli jest).
# - Błędy transportu i nieczytelne odpowiedzi -> SyncError bez komunikatu.
# - Nagłówki/autoryzacja nie są tu obsługiwane: podaj gotowy `httpx.AsyncClient`.


def _parse_created_at(raw: str) -> datetime:
    """Parsuje ISO8601 (także z sufiksem 'Z'); wynik zawsze aware UTC."""
    dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def decode_task(row: dict[str, Any]) -> TaskRecord:
    raw = row.get("status", "pending")
    try:
        status = TaskStatus(raw)
    except ValueError:
        status = TaskStatus.PENDING

    task_id = row.get("_id", row.get("id"))
    if task_id is None:
        raise KeyError("_id")
    return TaskRecord(
        task_id=TaskId(str(task_id)),
        title=row["title"],
        description=row.get("description"),
        created_at=_parse_created_at(row["createdAt"]),
        status=status,
    )


def _todo_path(task_id: TaskId) -> str:
    # ID jako jeden segment ścieżki ("/", "?", "#" są kodowane)
    return f"/todos/{quote(str(task_id), safe='')}"


def _server_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return None


class HttpSyncClient:
    """
    Implementacja SyncClient nad `httpx.AsyncClient`.

    :param base_url: Adres API, np. "http://localhost:5000/api".
    :param client: Gotowy klient httpx (nagłówki, auth, transport w testach).
    :param timeout: Timeout w sekundach, gdy klient tworzony jest tutaj.
    """
    def __init__(
        self,
        base_url: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        if client is None:
            if not base_url:
                raise ValueError("base_url or client is required")
            client = httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._client = client

    async def _request(self, operation: str, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _server_message(e.response)
            log.warning("%s %s -> %s (%s)", method, url, e.response.status_code, message)
            raise SyncError(operation, message, e.response.status_code) from e
        except httpx.HTTPError as e:
            log.warning("%s %s failed: %s", method, url, e)
            raise SyncError(operation) from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            log.warning("%s %s returned invalid JSON", method, url)
            raise SyncError(operation) from e

    def _decode(self, operation: str, row: Any) -> TaskRecord:
        try:
            return decode_task(row)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            log.warning("%s: malformed todo %r", operation, row)
            raise SyncError(operation) from e

    async def fetch_tasks(self, task_filter: TaskFilter) -> list[TaskRecord]:
        data = await self._request(
            "fetch", "GET", "/todos", params={"status": TaskFilter(task_filter).value}
        )
        rows = data.get("todos") if isinstance(data, dict) else None
        if not isinstance(rows, list):
            raise SyncError("fetch")
        return [self._decode("fetch", row) for row in rows]

    async def create_task(self, title: str, description: str | None = None) -> TaskRecord:
        data = await self._request(
            "create", "POST", "/todos", json={"title": title, "description": description}
        )
        return self._decode("create", data.get("todo") if isinstance(data, dict) else None)

    async def update_task(self, task_id: TaskId, changes: TaskChanges) -> TaskRecord:
        data = await self._request("update", "PUT", _todo_path(task_id), json=changes.as_payload())
        return self._decode("update", data.get("todo") if isinstance(data, dict) else None)

    async def delete_task(self, task_id: TaskId) -> None:
        await self._request("delete", "DELETE", _todo_path(task_id))

    async def aclose(self) -> None:
        await self._client.aclose()
