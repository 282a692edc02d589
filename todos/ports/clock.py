from typing import Protocol
from datetime import datetime

class Clock(Protocol):
    """Abstrakcja źródła czasu po stronie magazynu. Zwraca czas w strefie UTC (aware)."""
    def now(self) -> datetime:
        pass
