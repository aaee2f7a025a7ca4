"""Reconcile rebuilds held-file sets from each file's recorded holder."""
from efiling.models import RegistryFile, UserHeldFile
from efiling.services.results import ResultStatus


async def _file(session, title, **fields):
    file = RegistryFile(title=title, owning_unit_code="MOF", **fields)
    session.add(file)
    await session.commit()
    return file


async def test_consistent_registry_needs_no_repairs(movement, admin_actor, u1, registry_file, assert_consistent):
    await movement.request_file(admin_actor, registry_file.id, u1.id)

    result = await movement.reconcile()

    assert result.status == ResultStatus.SUCCESS
    assert result.data["repairs"] == 0
    await assert_consistent()


async def test_restores_missing_held_link(session, movement, u1, assert_consistent):
    # Crash after the file row was updated but before the held set was
    file = await _file(session, "Audit Queries", location="checked_out", current_holder_id=u1.id)

    result = await movement.reconcile()

    assert result.data["repairs"] == 1
    state = await assert_consistent()
    assert state[file.id] == ("checked_out", u1.id, [u1.id])


async def test_drops_link_to_available_file(session, movement, u2, assert_consistent):
    file = await _file(session, "Pensions")
    session.add(UserHeldFile(user_id=u2.id, file_id=file.id))
    await session.commit()

    result = await movement.reconcile()

    assert result.data["repairs"] == 1
    state = await assert_consistent()
    assert state[file.id] == ("available", None, [])


async def test_moves_link_to_recorded_holder(session, movement, u1, u2, assert_consistent):
    file = await _file(session, "Contracts", location="checked_out", current_holder_id=u1.id)
    session.add(UserHeldFile(user_id=u2.id, file_id=file.id))
    await session.commit()

    result = await movement.reconcile()

    assert result.data["repairs"] == 2
    state = await assert_consistent()
    assert state[file.id] == ("checked_out", u1.id, [u1.id])


async def test_clears_holder_on_available_file(session, movement, u1, assert_consistent):
    file = await _file(session, "Leave Roster", location="available", current_holder_id=u1.id)

    result = await movement.reconcile()

    assert result.data["repairs"] == 1
    state = await assert_consistent()
    assert state[file.id] == ("available", None, [])


async def test_checked_out_without_holder_goes_back_to_registry(session, movement, assert_consistent):
    file = await _file(session, "Vehicles", location="checked_out")

    result = await movement.reconcile()

    assert result.data["repairs"] == 1
    state = await assert_consistent()
    assert state[file.id] == ("available", None, [])


async def test_file_can_be_requested_after_repair(session, movement, admin_actor, u2, assert_consistent):
    file = await _file(session, "Vehicles", location="checked_out")
    await movement.reconcile()

    result = await movement.request_file(admin_actor, file.id, u2.id)

    assert result.status == ResultStatus.SUCCESS
    await assert_consistent()
