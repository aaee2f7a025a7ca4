"""A store failure part-way through a transition leaves no partial state behind."""
from efiling.models import FileCharge, FileRequest, UserHeldFile
from efiling.services.results import ResultStatus


class StoreDown(RuntimeError):
    pass


async def test_charge_failure_between_writes_rolls_back(movement, store, monkeypatch, admin_actor, u1, u2, registry_file, assert_consistent):
    fid, from_id, to_id = registry_file.id, u1.id, u2.id
    await movement.request_file(admin_actor, fid, from_id)

    async def fail(*args, **kwargs):
        raise StoreDown("connection reset")

    # Holder column and charge log are already written when the held-set update fails
    monkeypatch.setattr(store, "remove_where", fail)
    result = await movement.charge_file(admin_actor, fid, from_id, to_id)

    assert result.status == ResultStatus.PARTIAL_FAILURE
    assert "no changes were kept" in result.message
    assert "connection reset" in result.message
    state = await assert_consistent()
    assert state[fid] == ("checked_out", from_id, [from_id])
    monkeypatch.undo()
    assert await store.count(FileCharge) == 0


async def test_request_failure_after_log_append_rolls_back(movement, store, monkeypatch, admin_actor, u1, registry_file, assert_consistent):
    fid, uid = registry_file.id, u1.id
    real_append = store.append

    async def append(model, **entry):
        if model is UserHeldFile:
            raise StoreDown()
        return await real_append(model, **entry)

    monkeypatch.setattr(store, "append", append)
    result = await movement.request_file(admin_actor, fid, uid)

    assert result.status == ResultStatus.PARTIAL_FAILURE
    assert "StoreDown" in result.message
    state = await assert_consistent()
    assert state[fid] == ("available", None, [])
    monkeypatch.undo()
    assert await store.count(FileRequest) == 0


async def test_failed_rollback_asks_for_reconcile(movement, store, monkeypatch, admin_actor, u1, registry_file):
    fid, uid = registry_file.id, u1.id
    async def fail(*args, **kwargs):
        raise StoreDown("disk full")

    monkeypatch.setattr(store, "append", fail)
    monkeypatch.setattr(store, "rollback", fail)
    result = await movement.request_file(admin_actor, fid, uid)

    assert result.status == ResultStatus.PARTIAL_FAILURE
    assert "run reconcile" in result.message
    monkeypatch.undo()
    await store.rollback()


async def test_engine_usable_after_failure(movement, store, monkeypatch, admin_actor, u1, registry_file, assert_consistent):
    fid, uid = registry_file.id, u1.id
    async def fail(*args, **kwargs):
        raise StoreDown()

    monkeypatch.setattr(store, "append", fail)
    assert (await movement.request_file(admin_actor, fid, uid)).status == ResultStatus.PARTIAL_FAILURE
    monkeypatch.undo()

    result = await movement.request_file(admin_actor, fid, uid)

    assert result.status == ResultStatus.SUCCESS
    await assert_consistent()
