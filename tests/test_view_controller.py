import asyncio
from dataclasses import replace

import pytest

from todos.domain.enums import TaskFilter, TaskStatus
from todos.domain.task import TaskChanges, TaskId
from todos.services.view_controller import (
    DELETE_FAILED,
    FETCH_FAILED,
    SAVE_FAILED,
    UPDATE_FAILED,
    ViewController,
)

from .fakes import FakeSyncClient, T0, make_task


def ids(controller: ViewController) -> list[str]:
    return [t.task_id for t in controller.store]


# --- fetch ---

@pytest.mark.asyncio
@pytest.mark.parametrize("task_filter", list(TaskFilter))
async def test_fetch_shows_only_records_matching_filter(controller, task_filter):
    outcome = await controller.on_filter_change(task_filter)

    assert outcome.ok
    assert controller.filter is task_filter
    assert len(controller.store) > 0
    assert all(task_filter.matches(t.status) for t in controller.store)


@pytest.mark.asyncio
async def test_filter_change_always_refetches(controller, remote):
    await controller.on_filter_change(TaskFilter.ALL)
    await controller.on_filter_change(TaskFilter.PENDING)

    assert remote.calls == [("fetch", TaskFilter.ALL), ("fetch", TaskFilter.PENDING)]
    assert ids(controller) == ["3", "1"]


@pytest.mark.asyncio
async def test_fetch_failure_keeps_stale_store(controller, remote):
    await controller.load()
    remote.fail("fetch", "server exploded")

    outcome = await controller.on_filter_change(TaskFilter.COMPLETED)

    assert outcome.ok is False
    assert controller.error == FETCH_FAILED
    assert controller.filter is TaskFilter.COMPLETED
    assert ids(controller) == ["3", "2", "1"]


@pytest.mark.asyncio
async def test_stale_fetch_response_is_discarded(controller, remote):
    gate = remote.hold_next("fetch")
    first = asyncio.create_task(controller.on_filter_change(TaskFilter.ALL))
    await asyncio.sleep(0)

    second = await controller.on_filter_change(TaskFilter.COMPLETED)
    gate.set()
    stale = await first

    assert second.ok
    assert stale.skipped
    assert ids(controller) == ["2"]


@pytest.mark.asyncio
async def test_stale_fetch_failure_does_not_set_error(controller, remote):
    remote.fail("fetch")
    gate = remote.hold_next("fetch")
    first = asyncio.create_task(controller.on_filter_change(TaskFilter.ALL))
    await asyncio.sleep(0)
    remote.recover("fetch")

    await controller.on_filter_change(TaskFilter.PENDING)
    remote.fail("fetch")
    gate.set()
    stale = await first

    assert stale.skipped
    assert controller.error is None


# --- create ---

@pytest.mark.asyncio
async def test_create_prepends_and_clears_draft(controller, remote):
    await controller.load()
    remote.created = make_task("9", "Buy milk", description="")
    controller.session.set_title("Buy milk")
    controller.session.set_description("")

    outcome = await controller.on_submit()

    assert outcome.ok
    assert remote.calls[-1] == ("create", "Buy milk", "")
    assert ids(controller) == ["9", "3", "2", "1"]
    assert controller.total_count == 4
    assert controller.session.draft.title == ""
    assert controller.session.draft.description == ""
    assert controller.busy is False


@pytest.mark.asyncio
@pytest.mark.parametrize("title", ["", "   ", "\t\n"])
async def test_blank_title_is_silently_ignored(controller, remote, title):
    await controller.load()
    controller.error = "previous failure"
    controller.session.set_title(title)
    calls_before = list(remote.calls)

    outcome = await controller.on_submit()

    assert outcome.skipped
    assert remote.calls == calls_before
    assert ids(controller) == ["3", "2", "1"]
    assert controller.error == "previous failure"
    assert controller.session.is_editing is False


@pytest.mark.asyncio
async def test_blank_title_while_editing_keeps_session(controller):
    await controller.load()
    controller.start_edit(TaskId("1"))
    controller.session.set_title(" ")

    outcome = await controller.on_submit()

    assert outcome.skipped
    assert controller.session.editing_id == "1"


@pytest.mark.asyncio
async def test_create_failure_uses_server_message_and_keeps_draft(controller, remote):
    remote.fail("create", "Title too long")
    controller.session.set_title("x" * 500)
    controller.session.set_description("d")

    outcome = await controller.on_submit()

    assert outcome.error == "Title too long"
    assert controller.error == "Title too long"
    assert controller.session.draft.title == "x" * 500
    assert controller.session.draft.description == "d"
    assert controller.busy is False


@pytest.mark.asyncio
async def test_create_failure_without_message_uses_fallback(controller, remote):
    remote.fail("create")
    controller.session.set_title("A")

    await controller.on_submit()

    assert controller.error == SAVE_FAILED


@pytest.mark.asyncio
async def test_submit_while_busy_is_skipped(controller, remote):
    gate = remote.hold_next("create")
    controller.session.set_title("A")
    first = asyncio.create_task(controller.on_submit())
    await asyncio.sleep(0)

    assert controller.busy is True
    assert controller.submit_label == "Saving..."
    second = await controller.on_submit()
    gate.set()
    await first

    assert second.skipped
    assert [c[0] for c in remote.calls] == ["create"]
    assert controller.busy is False


# --- update (edit) ---

@pytest.mark.asyncio
async def test_update_replaces_in_place_and_ends_edit(controller, remote):
    await controller.load()
    assert controller.start_edit(TaskId("2"))
    assert controller.submit_label == "Update"
    controller.session.set_title("B2")

    outcome = await controller.on_submit()

    assert outcome.ok
    assert remote.calls[-1] == ("update", "2", TaskChanges(title="B2", description="bbb"))
    assert ids(controller) == ["3", "2", "1"]
    assert controller.store.get(TaskId("2")).title == "B2"
    assert controller.session.is_editing is False
    assert controller.session.draft.title == ""
    assert controller.submit_label == "Add Todo"


@pytest.mark.asyncio
async def test_update_failure_keeps_edit_session_and_draft(controller, remote):
    await controller.load()
    controller.start_edit(TaskId("1"))
    controller.session.set_title("A but much longer")
    controller.session.set_description("typed")
    remote.fail("update", "Title too long")

    await controller.on_submit()

    assert controller.error == "Title too long"
    assert controller.session.editing_id == "1"
    assert controller.session.draft.title == "A but much longer"
    assert controller.session.draft.description == "typed"
    assert controller.store.get(TaskId("1")).title == "A"


@pytest.mark.asyncio
async def test_start_then_cancel_edit_leaves_store_untouched(controller):
    await controller.load()
    before = controller.store.items

    controller.start_edit(TaskId("2"))
    controller.cancel_edit()

    assert controller.session.is_editing is False
    assert controller.session.draft.title == ""
    assert controller.session.draft.description == ""
    assert controller.store.items == before


@pytest.mark.asyncio
async def test_start_edit_unknown_id_returns_false(controller):
    await controller.load()

    assert controller.start_edit(TaskId("missing")) is False
    assert controller.session.is_editing is False


# --- toggle ---

@pytest.mark.asyncio
async def test_toggle_scenario_pending_to_completed():
    remote = FakeSyncClient([make_task("1", "A", TaskStatus.PENDING)])
    controller = ViewController(remote)

    await controller.on_filter_change(TaskFilter.PENDING)
    outcome = await controller.on_toggle_status(TaskId("1"))

    assert outcome.ok
    assert remote.calls[-1] == ("update", "1", TaskChanges(status=TaskStatus.COMPLETED))
    [task] = controller.store.items
    assert (task.task_id, task.title, task.status) == ("1", "A", TaskStatus.COMPLETED)


@pytest.mark.asyncio
async def test_toggle_completed_back_to_pending_keeps_other_fields(controller):
    await controller.load()
    before = controller.store.get(TaskId("2"))

    await controller.on_toggle_status(TaskId("2"))

    after = controller.store.get(TaskId("2"))
    assert after == replace(before, status=TaskStatus.PENDING)
    assert ids(controller) == ["3", "2", "1"]


@pytest.mark.asyncio
async def test_toggle_is_pessimistic(controller, remote):
    await controller.load()
    gate = remote.hold_next("update")
    pending = asyncio.create_task(controller.on_toggle_status(TaskId("1")))
    await asyncio.sleep(0)

    assert controller.store.get(TaskId("1")).status == TaskStatus.PENDING
    assert controller.is_pending(TaskId("1"))
    gate.set()
    await pending

    assert controller.store.get(TaskId("1")).status == TaskStatus.COMPLETED
    assert not controller.is_pending(TaskId("1"))


@pytest.mark.asyncio
async def test_toggle_failure_sets_generic_error_and_changes_nothing(controller, remote):
    await controller.load()
    remote.fail("update", "ignored server text")

    outcome = await controller.on_toggle_status(TaskId("1"))

    assert outcome.error == UPDATE_FAILED
    assert controller.error == UPDATE_FAILED
    assert controller.store.get(TaskId("1")).status == TaskStatus.PENDING


@pytest.mark.asyncio
async def test_duplicate_toggle_in_flight_is_rejected(controller, remote):
    await controller.load()
    gate = remote.hold_next("update")
    first = asyncio.create_task(controller.on_toggle_status(TaskId("1")))
    await asyncio.sleep(0)

    second = await controller.on_toggle_status(TaskId("1"))
    blocked_delete = await controller.on_delete(TaskId("1"))
    gate.set()
    await first

    assert second.skipped
    assert blocked_delete.skipped
    assert [c[0] for c in remote.calls].count("update") == 1
    assert "delete" not in [c[0] for c in remote.calls]


@pytest.mark.asyncio
async def test_toggle_unknown_id_makes_no_call(controller, remote):
    await controller.load()
    calls_before = len(remote.calls)

    outcome = await controller.on_toggle_status(TaskId("missing"))

    assert outcome.skipped
    assert len(remote.calls) == calls_before


# --- delete ---

@pytest.mark.asyncio
async def test_delete_removes_exactly_one_record(controller):
    await controller.load()

    outcome = await controller.on_delete(TaskId("2"))

    assert outcome.ok
    assert ids(controller) == ["3", "1"]


@pytest.mark.asyncio
async def test_delete_failure_keeps_record_visible(controller, remote):
    await controller.load()
    remote.fail("delete")

    outcome = await controller.on_delete(TaskId("2"))

    assert outcome.error == DELETE_FAILED
    assert controller.error == DELETE_FAILED
    assert ids(controller) == ["3", "2", "1"]


# --- error slot ---

@pytest.mark.asyncio
async def test_error_persists_across_unrelated_successes(controller, remote):
    await controller.load()
    remote.fail("create", "Title too long")
    controller.session.set_title("bad")
    await controller.on_submit()
    remote.recover("create")

    await controller.on_toggle_status(TaskId("1"))
    await controller.on_delete(TaskId("3"))
    await controller.on_filter_change(TaskFilter.ALL)

    assert controller.error == "Title too long"


@pytest.mark.asyncio
async def test_error_cleared_at_start_of_next_submit(controller, remote):
    remote.fail("delete")
    await controller.load()
    await controller.on_delete(TaskId("1"))
    assert controller.error == DELETE_FAILED

    controller.session.set_title("fine")
    await controller.on_submit()

    assert controller.error is None


@pytest.mark.asyncio
async def test_counts_follow_store(controller):
    await controller.load()

    assert (controller.total_count, controller.pending_count, controller.completed_count) == (3, 2, 1)

    await controller.on_toggle_status(TaskId("3"))

    assert (controller.pending_count, controller.completed_count) == (1, 2)
    assert controller.store.get(TaskId("3")).created_at > T0


@pytest.mark.asyncio
async def test_create_finishing_after_start_edit_keeps_edit_draft(controller, remote):
    await controller.load()
    gate = remote.hold_next("create")
    controller.session.set_title("New one")
    creating = asyncio.create_task(controller.on_submit())
    await asyncio.sleep(0)

    controller.start_edit(TaskId("2"))
    gate.set()
    outcome = await creating

    assert outcome.ok
    assert ids(controller)[0] == outcome.record.task_id
    assert controller.session.editing_id == "2"
    assert controller.session.draft.title == "B"
    assert controller.session.draft.description == "bbb"
