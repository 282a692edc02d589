from typing import Protocol

class IdProvider(Protocol):
    """Port odpowiedzialny za nadawanie identyfikatorów nowym zadaniom (po stronie magazynu)."""
    def new_id(self) -> str:
        pass
