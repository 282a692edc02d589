import pytest

from todos.domain.enums import TaskStatus
from todos.services.view_controller import ViewController

from .fakes import FakeSyncClient, make_task


@pytest.fixture()
def remote() -> FakeSyncClient:
    """Serwer z trzema zadaniami, od najnowszego."""
    return FakeSyncClient([
        make_task("3", "C", TaskStatus.PENDING, minutes=3),
        make_task("2", "B", TaskStatus.COMPLETED, description="bbb", minutes=2),
        make_task("1", "A", TaskStatus.PENDING, minutes=1),
    ])


@pytest.fixture()
def controller(remote) -> ViewController:
    return ViewController(remote)
