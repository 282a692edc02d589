from dataclasses import dataclass, field
from todos.domain.task import TaskRecord, TaskId

### COMMENTS
# ==========================================================
# Sesja edycji (domain/edit_session.py): jeden slot, dwa tryby.
# ==========================================================
# CreateMode(draft)        - formularz służy do dodawania nowego zadania
# EditMode(task_id, draft) - formularz edytuje istniejące zadanie
#
# Przejścia:
#   start_edit(task)  : dowolny tryb -> EditMode(task.task_id, tytuł/opis zadania)
#   cancel_edit()     : EditMode -> CreateMode(pusty draft)
#   finish_edit()     : po udanym zapisie edycji, jak cancel_edit()
#
# Draft należy do trybu, więc rozpoczęcie edycji nadpisuje szkic tworzenia,
# a wyjście z edycji zostawia pusty formularz.


@dataclass
class Draft:
    """Pola formularza wpisywane przez użytkownika."""
    title: str = ""
    description: str = ""

    def clear(self) -> None:
        self.title = ""
        self.description = ""


@dataclass(frozen=True)
class CreateMode:
    draft: Draft = field(default_factory=Draft)


@dataclass(frozen=True)
class EditMode:
    task_id: TaskId
    draft: Draft = field(default_factory=Draft)


class EditSession:
    """
    Maszyna stanów: co najwyżej jedna aktywna edycja naraz.
    """
    def __init__(self) -> None:
        self.mode: CreateMode | EditMode = CreateMode()

    @property
    def is_editing(self) -> bool:
        return isinstance(self.mode, EditMode)

    @property
    def editing_id(self) -> TaskId | None:
        if isinstance(self.mode, EditMode):
            return self.mode.task_id
        return None

    @property
    def draft(self) -> Draft:
        return self.mode.draft

    def start_edit(self, task: TaskRecord) -> None:
        self.mode = EditMode(task.task_id, Draft(task.title, task.description or ""))

    def cancel_edit(self) -> None:
        if self.is_editing:
            self.mode = CreateMode()

    def finish_edit(self) -> None:
        self.mode = CreateMode()

    def set_title(self, title: str) -> None:
        self.mode.draft.title = title

    def set_description(self, description: str) -> None:
        self.mode.draft.description = description
