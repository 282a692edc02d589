### COMMENTS
# ============================================
# Konwencja użycia błędów domenowych w projekcie
# ============================================
# - Adaptery SyncClient (memory, sql, http):
#     * mapują błędy techniczne (httpx.HTTPError, SQLAlchemyError, zły JSON) na SyncError
#     * brak rekordu -> TaskNotFoundError, złe dane -> TaskValidationError
#
# - ViewController:
#     * łapie wyłącznie SyncError i zapisuje komunikat w slocie `error`
#     * pusty tytuł to walidacja po stronie klienta: cicho ignorowany, bez wyjątku
#
# - UI (CLI):
#     * łapie DomainError i wyświetla przyjazny komunikat


class DomainError(Exception):
    """Bazowa klasa dla błędów domenowych.
    Umożliwia odróżnienie błędów domeny od błędów technicznych (bugów).
    Nie powinna być rzucana bezpośrednio; używaj klas pochodnych.
    """


class SyncError(DomainError):
    """Rzucany, gdy wywołanie zdalnego magazynu zadań się nie powiodło.

    :param operation: Nazwa operacji ("fetch", "create", "update", "delete").
    :param message: Czytelny komunikat serwera (jeśli serwer go podał).
    :param status_code: Kod HTTP, jeśli błąd pochodzi z odpowiedzi serwera.
    """
    def __init__(self, operation: str, message: str | None = None, status_code: int | None = None):
        self.operation = operation
        self.message = message
        self.status_code = status_code
        super().__init__(self.__str__())

    def __str__(self):
        return self.message or f"Operation '{self.operation}' failed"


class TaskNotFoundError(SyncError):
    """Rzucany, gdy zadanie o podanym ID nie istnieje w magazynie."""
    def __init__(self, task_id: str, operation: str = "update"):
        self.task_id = task_id
        super().__init__(operation, f"Todo {task_id} not found", status_code=404)


class TaskValidationError(SyncError):
    """Rzucany przez magazyn, gdy dane zadania nie spełniają reguł (np. pusty tytuł).

    Zawiera nazwę pola (`field`), co ułatwia prezentację w UI.
    """
    def __init__(self, field: str, message: str, operation: str = "create"):
        self.field = field
        super().__init__(operation, message, status_code=400)
