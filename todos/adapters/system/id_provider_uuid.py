from todos.ports.id_provider import IdProvider
import uuid

class UuidIdProvider(IdProvider):

    def new_id(self) -> str:
        return uuid.uuid4().hex
