import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional
from typer import Option, Typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.panel import Panel
from todos.adapters.http.sync_client import HttpSyncClient
from todos.adapters.memory.sync_client import InMemorySyncClient
from todos.adapters.sql.sync_client import SqlSyncClient
from todos.api.colors import TaskColor
from todos.config import load_settings
from todos.domain.enums import TaskFilter, TaskStatus
from todos.domain.errors import DomainError
from todos.domain.task import TaskId, TaskRecord
from todos.logging_setup import setup_logging
from todos.ports.sync_client import SyncClient
from todos.services.view_controller import Outcome, ViewController


### COMMENTS
# ==========================================================
# CLI (Typer + Rich): terminalowy widok listy zadań.
# ==========================================================
# Rola:
# - Mapuje komendy na akcje ViewController (filtr, submit, toggle, delete, edycja).
# - Wyświetla listę, liczniki i slot błędu kontrolera.
#
# Zasady:
# - Zero logiki synchronizacji: wszystko idzie przez ViewController.
# - Backend wybierany w callbacku: --api-url (REST) > --db (SQLite) > pamięć.
# - Jedna komenda = jedna pętla asyncio; klient zamykany na końcu komendy.


app = Typer(help="Todos CLI")
console = Console()

client: SyncClient | None = None  # ustawimy w callbacku


def build_client(db: Optional[Path], api_url: Optional[str], timeout: float = 10.0) -> SyncClient:
    """Tworzy klienta magazynu:
    - podany URL -> REST (httpx)
    - podany plik -> SQLite (trwałość)
    - nic -> pamięć (znika po zakończeniu procesu)
    """
    if api_url:
        return HttpSyncClient(api_url, timeout=timeout)
    if db:
        return SqlSyncClient(db)
    return InMemorySyncClient()


@app.callback()
def main(
    db: Optional[Path] = Option(None, "--db", help="Plik SQLite z zadaniami (tryb trwały)"),
    api_url: Optional[str] = Option(None, "--api-url", help="Adres REST API, np. http://localhost:5000/api"),
    verbose: bool = Option(False, "--verbose", "-v", help="Logi DEBUG na stderr"),
) -> None:
    """Bootstrap zależności na starcie procesu CLI."""
    global client
    settings = load_settings()
    setup_logging(
        console_level=logging.DEBUG if verbose else settings.log_level,
        log_dir=settings.log_dir,
    )
    client = build_client(db or settings.db_path, api_url or settings.api_url, settings.http_timeout)


def run(action: Callable[[ViewController], Awaitable[None]]) -> None:
    """Uruchamia akcję na świeżym kontrolerze i zamyka klienta."""
    async def runner() -> None:
        controller = ViewController(client)
        try:
            await action(controller)
        finally:
            await client.aclose()

    try:
        asyncio.run(runner())
    except DomainError as e:
        console.print(Panel.fit(f"❌ {escape(str(e))}", title="Błąd domenowy", border_style="red"))


def short_id(task_id: str, n: int = 8) -> str:
    """Zwraca skróconą wersję ID do wyświetlenia (np. pierwsze 8 znaków)."""
    return task_id[:n]


def resolve_id(controller: ViewController, task_id: str) -> TaskId | None:
    """Pełne ID albo jednoznaczny prefiks (np. skrócone ID z `todos list`)."""
    if task_id in controller.store:
        return TaskId(task_id)
    matches = [t.task_id for t in controller.store if t.task_id.startswith(task_id)]
    if len(matches) == 1:
        return matches[0]
    return None


def color_status(status: TaskStatus) -> str:
    """Zwraca status w Rich-markup z kolorem."""
    match status:
        case TaskStatus.PENDING:
            return f"{TaskColor.YELLOW}Pending{TaskColor.RESET}"
        case TaskStatus.COMPLETED:
            return f"{TaskColor.GREEN}Completed{TaskColor.RESET}"
        case _:
            return str(status)


def render_error(controller: ViewController) -> None:
    if controller.error:
        console.print(Panel.fit(f"❌ {escape(controller.error)}", title="Błąd", border_style="red"))


def render_not_found(task_id: str) -> None:
    console.print(Panel.fit(
        f"❌ Nie znaleziono zadania o ID: {escape(task_id)}\n"
        f"[dim]Użyj 'todos list', żeby znaleźć poprawne ID[/]",
        title="Nie znaleziono",
        border_style="red",
    ))


def render_task(task: TaskRecord, header: str, border_style: str) -> None:
    console.print(Panel.fit(
        f"{header}\n"
        f"[cyan]ID:[/cyan] {short_id(task.task_id)}\n"
        f"[dim]Title:[/dim] {escape(task.title)}"
        + (f"\n[dim]Description:[/dim] {escape(task.description)}" if task.description else "")
        + f"\nStatus: {color_status(task.status)}",
        title="Sukces",
        border_style=border_style,
    ))


def render_list(controller: ViewController) -> None:
    """Renderuje tabelę Rich z kolumnami: ID, Title, Created, Status + stopką z licznikami."""
    if controller.total_count == 0:
        console.print(Panel.fit("No todos yet. Create your first one!", border_style="dim"))
    else:
        table = Table(show_lines=True, header_style="bold")
        table.add_column("ID", no_wrap=True, style="cyan")
        table.add_column("Title")
        table.add_column("Created", no_wrap=True, style="dim")
        table.add_column("Status", no_wrap=True)

        for t in controller.store:
            title = escape(t.title)
            if t.description:
                title += f"\n[dim]{escape(t.description)}[/dim]"
            table.add_row(
                short_id(t.task_id),
                title,
                t.created_at.strftime("%Y-%m-%d"),
                color_status(t.status),
            )
        console.print(table)

    console.print(
        f"[dim]Filtr: {controller.filter} • All ({controller.total_count}) • "
        f"Pending ({controller.pending_count}) • Completed ({controller.completed_count})[/dim]"
    )


def render_submit(controller: ViewController, outcome: Outcome, header: str) -> None:
    if outcome.ok:
        render_task(outcome.record, header, "green")
    elif outcome.skipped:
        console.print("[dim]Tytuł jest pusty, nic nie zapisano.[/dim]")
    else:
        render_error(controller)


@app.command("list")
def list_cmd(
    task_filter: TaskFilter = Option(TaskFilter.ALL, "--filter", "-F", case_sensitive=False),
) -> None:
    """
    Listuje zadania wybrane filtrem (pobranie z serwera przy każdej zmianie filtra).
    """
    async def action(controller: ViewController) -> None:
        await controller.on_filter_change(task_filter)
        render_error(controller)
        render_list(controller)

    run(action)


@app.command("add")
def add(title: str, desc: str = Option("", "--desc", "-d")) -> None:
    """
    Dodaje nowe zadanie.

    Flow:
    - Wpisz title/desc do szkicu (tryb tworzenia), wywołaj controller.on_submit().
    - Sukces: Panel „✅ Dodano zadanie”, pokaż skrócone ID.
    - Błąd: komunikat serwera (albo domyślny) w czerwonym panelu.
    """
    async def action(controller: ViewController) -> None:
        controller.session.set_title(title)
        controller.session.set_description(desc)
        outcome = await controller.on_submit()
        render_submit(controller, outcome, "✅ Dodano zadanie")

    run(action)


@app.command("edit")
def edit(
    task_id: str,
    title: Optional[str] = Option(None, "--title", "-t"),
    desc: Optional[str] = Option(None, "--desc", "-d"),
) -> None:
    """
    Edytuje tytuł i/lub opis zadania.

    Flow:
    - Pobierz listę, controller.start_edit(id): szkic = obecne wartości.
    - Nadpisz podane pola, controller.on_submit() wysyła update.
    """
    async def action(controller: ViewController) -> None:
        await controller.load()
        resolved = resolve_id(controller, task_id)
        if resolved is None:
            render_error(controller)
            render_not_found(task_id)
            return
        controller.start_edit(resolved)
        if title is not None:
            controller.session.set_title(title)
        if desc is not None:
            controller.session.set_description(desc)
        outcome = await controller.on_submit()
        render_submit(controller, outcome, "✏️ Zaktualizowano zadanie")

    run(action)


@app.command("toggle")
def toggle(task_id: str) -> None:
    """
    Przełącza status zadania (pending <-> completed).
    """
    async def action(controller: ViewController) -> None:
        await controller.load()
        resolved = resolve_id(controller, task_id)
        if resolved is None:
            render_error(controller)
            render_not_found(task_id)
            return
        outcome = await controller.on_toggle_status(resolved)
        if outcome.ok:
            render_task(outcome.record, "✅ Zmieniono status", "green")
        else:
            render_error(controller)

    run(action)


@app.command("rm")
def rm(task_id: str) -> None:
    """
    Usuwa zadanie.
    """
    async def action(controller: ViewController) -> None:
        await controller.load()
        resolved = resolve_id(controller, task_id)
        if resolved is None:
            render_error(controller)
            render_not_found(task_id)
            return
        outcome = await controller.on_delete(resolved)
        if outcome.ok:
            console.print(Panel.fit(
                f"🟡 Zadanie usunięte\nID: {short_id(resolved)}",
                title="Usunięto",
                border_style="yellow",
            ))
        else:
            render_error(controller)

    run(action)


@app.command("demo")
def demo() -> None:
    """
    Pokazowy przebieg działania aplikacji w jednym procesie.

    - Tworzy 3 zadania.
    - Oznacza jedno jako zakończone, edytuje drugie, usuwa trzecie.
    - Pokazuje listę dla każdego filtra.
    """
    async def action(controller: ViewController) -> None:
        console.print(Panel.fit("🚀 Start demonstracji", border_style="cyan"))
        await controller.load()

        for title, desc in (
            ("Buy milk", "2% lactose-free"),
            ("Call mom", "Sunday afternoon"),
            ("Read a book", "DDD chapter 3"),
        ):
            controller.session.set_title(title)
            controller.session.set_description(desc)
            await controller.on_submit()

        console.print(Panel.fit(f"✅ Utworzono {controller.total_count} zadania", border_style="green"))
        render_list(controller)

        milk, mom, book = controller.store.items[2], controller.store.items[1], controller.store.items[0]

        await controller.on_toggle_status(milk.task_id)
        console.print(Panel.fit(f"✔️ Zamknięto zadanie: {short_id(milk.task_id)} ({milk.title})", border_style="yellow"))

        controller.start_edit(mom)
        controller.session.set_title("Call mom and dad")
        await controller.on_submit()
        console.print(Panel.fit(f"✏️ Zmieniono tytuł: {short_id(mom.task_id)}", border_style="blue"))

        await controller.on_delete(book.task_id)
        console.print(Panel.fit(f"🗑️ Usunięto zadanie: {short_id(book.task_id)} ({book.title})", border_style="red"))

        for task_filter in TaskFilter:
            await controller.on_filter_change(task_filter)
            console.print(f"\n📋 Filtr: {task_filter}")
            render_list(controller)

        render_error(controller)
        console.print(Panel.fit("🏁 Demo zakończone", border_style="cyan"))

    run(action)


if __name__ == "__main__":
    app()
