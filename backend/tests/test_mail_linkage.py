"""Filing mails and personnel records into files."""
import uuid

from efiling.models import FileDocument, FilePersonnel, Personnel, RegistryFile, Role
from efiling.services.access_policy import Actor
from efiling.services.results import ResultStatus


async def test_attach_appends_in_order(movement, store, admin_actor, registry_file, add_mail):
    first = await add_mail("incoming", "Request for funds")
    second = await add_mail("outgoing", "Approval")

    r1 = await movement.attach_mail(admin_actor, registry_file.id, first.id, "incoming")
    r2 = await movement.attach_mail(admin_actor, registry_file.id, second.id, "outgoing")

    assert r1.status == ResultStatus.SUCCESS
    assert r1.data["position"] == 0
    assert r2.data["position"] == 1
    docs = await store.find(FileDocument, FileDocument.file_id == registry_file.id, order_by=[FileDocument.position])
    assert [(d.mail_id, d.direction) for d in docs] == [(first.id, "incoming"), (second.id, "outgoing")]


async def test_attach_twice_is_already_satisfied(movement, store, admin_actor, registry_file, add_mail):
    mail = await add_mail()
    await movement.attach_mail(admin_actor, registry_file.id, mail.id, "incoming")

    result = await movement.attach_mail(admin_actor, registry_file.id, mail.id, "incoming")

    assert result.status == ResultStatus.ALREADY_SATISFIED
    assert await store.count(FileDocument, FileDocument.file_id == registry_file.id) == 1


async def test_attach_works_while_checked_out(movement, admin_actor, u1, registry_file, add_mail):
    mail = await add_mail()
    await movement.request_file(admin_actor, registry_file.id, u1.id)

    result = await movement.attach_mail(admin_actor, registry_file.id, mail.id, "incoming")

    assert result.status == ResultStatus.SUCCESS


async def test_attach_direction_must_match_mail(movement, admin_actor, registry_file, add_mail):
    mail = await add_mail("outgoing")

    result = await movement.attach_mail(admin_actor, registry_file.id, mail.id, "incoming")

    assert result.status == ResultStatus.VALIDATION_ERROR


async def test_attach_unknown_direction(movement, admin_actor, registry_file, add_mail):
    mail = await add_mail()

    result = await movement.attach_mail(admin_actor, registry_file.id, mail.id, "sideways")

    assert result.status == ResultStatus.VALIDATION_ERROR


async def test_attach_unknown_mail(movement, admin_actor, registry_file):
    result = await movement.attach_mail(admin_actor, registry_file.id, uuid.uuid4(), "incoming")

    assert result.status == ResultStatus.NOT_FOUND
    assert result.message == "Mail not found"


async def test_detach_removes_mail(movement, store, admin_actor, registry_file, add_mail):
    mail = await add_mail()
    await movement.attach_mail(admin_actor, registry_file.id, mail.id, "incoming")

    result = await movement.detach_mail(admin_actor, registry_file.id, mail.id)

    assert result.status == ResultStatus.SUCCESS
    assert result.data["removed"] == 1
    assert await store.count(FileDocument) == 0


async def test_detach_missing_mail_is_noop(movement, admin_actor, registry_file):
    result = await movement.detach_mail(admin_actor, registry_file.id, uuid.uuid4())

    assert result.status == ResultStatus.SUCCESS
    assert result.data["removed"] == 0


async def test_plain_user_cannot_attach(movement, u1, registry_file, add_mail):
    mail = await add_mail()

    result = await movement.attach_mail(Actor.from_user(u1), registry_file.id, mail.id, "incoming")

    assert result.status == ResultStatus.FORBIDDEN


async def test_personnel_only_in_personal_files(session, movement, store, admin_actor, registry_file):
    personnel = Personnel(surname="Musa", firstname="Ibrahim", emp_no="EMP-44")
    personal = RegistryFile(title="Musa Ibrahim", file_type="personal", owning_unit_code="MOH")
    session.add_all([personnel, personal])
    await session.commit()
    pid, personal_id = personnel.id, personal.id

    rejected = await movement.linkage.attach_personnel(admin_actor, registry_file.id, pid)
    added = await movement.linkage.attach_personnel(admin_actor, personal_id, pid)
    again = await movement.linkage.attach_personnel(admin_actor, personal_id, pid)

    assert rejected.status == ResultStatus.VALIDATION_ERROR
    assert added.status == ResultStatus.SUCCESS
    assert again.status == ResultStatus.ALREADY_SATISFIED
    assert await store.count(FilePersonnel, FilePersonnel.file_id == personal_id) == 1

    removed = await movement.linkage.detach_personnel(admin_actor, personal_id, pid)
    assert removed.data["removed"] == 1


async def test_officer_may_attach(movement, add_user, registry_file, add_mail):
    officer = await add_user("Eze", role=Role.REGISTRY_OFFICER)
    mail = await add_mail()

    result = await movement.attach_mail(Actor.from_user(officer), registry_file.id, mail.id, "incoming")

    assert result.status == ResultStatus.SUCCESS
