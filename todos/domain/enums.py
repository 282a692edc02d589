from enum import Enum

class TaskStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"

    def flipped(self) -> "TaskStatus":
        """Pending <-> Completed."""
        if self is TaskStatus.PENDING:
            return TaskStatus.COMPLETED
        return TaskStatus.PENDING

    def __str__(self):
        return self.value


class TaskFilter(str, Enum):
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"

    def matches(self, status: TaskStatus) -> bool:
        if self is TaskFilter.ALL:
            return True
        return TaskStatus(status).value == self.value

    def __str__(self):
        return self.value
