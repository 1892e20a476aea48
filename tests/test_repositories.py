import pytest

from registry_api.db.security import hash_token
from registry_api.errors import ErrorKind
from registry_api.result import Err, Ok


@pytest.mark.asyncio
async def test_package_create_grants_first_uploader(runtime, identities):
    alice = identities["alice"]

    package = (await runtime.packages.create("widgets", description="Useful", uploader_id=alice.user_id)).unwrap()

    assert package.description == "Useful"
    assert (await runtime.uploaders.can_publish(package.id, alice.user_id)).unwrap() is True
    fetched = (await runtime.packages.get_by_name("widgets")).unwrap()
    assert fetched.id == package.id


@pytest.mark.asyncio
async def test_package_create_duplicate_name(runtime, identities):
    await runtime.packages.create("widgets", uploader_id=identities["alice"].user_id)

    again = await runtime.packages.create("widgets", uploader_id=identities["bob"].user_id)

    assert isinstance(again, Err)
    assert again.error.kind is ErrorKind.PACKAGE_EXISTS
    package = (await runtime.packages.get_by_name("widgets")).unwrap()
    assert (await runtime.uploaders.can_publish(package.id, identities["bob"].user_id)).unwrap() is False


@pytest.mark.asyncio
async def test_package_create_with_unknown_uploader_is_a_storage_error(runtime):
    result = await runtime.packages.create("widgets", uploader_id=9999)

    assert isinstance(result, Err)
    assert result.error.kind is ErrorKind.STORAGE
    missing = await runtime.packages.get_by_name("widgets")
    assert isinstance(missing, Err) and missing.error.kind is ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_package_lookup_misses(runtime):
    by_name = await runtime.packages.get_by_name("missing")
    by_id = await runtime.packages.get_by_id(12345)

    assert isinstance(by_name, Err) and by_name.error.kind is ErrorKind.NOT_FOUND
    assert isinstance(by_id, Err) and by_id.error.kind is ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_package_list_all_counts_and_search(runtime, identities):
    widgets = (await runtime.packages.create("widgets", uploader_id=identities["alice"].user_id)).unwrap()
    await runtime.packages.create("gears")
    await runtime.uploaders.add_uploader(widgets.id, identities["bob"].user_id)
    await runtime.versions.create(
        package_id=widgets.id,
        version="1.0.0",
        manifest="",
        archive_url="",
        archive_sha256="",
    )

    rows = (await runtime.packages.list_all()).unwrap()

    assert [row.package.name for row in rows] == ["gears", "widgets"]
    assert (rows[0].version_count, rows[0].uploader_count) == (0, 0)
    assert (rows[1].version_count, rows[1].uploader_count) == (1, 2)

    searched = (await runtime.packages.list_all(search="widg")).unwrap()
    assert [row.package.name for row in searched] == ["widgets"]

    paged = (await runtime.packages.list_all(limit=1, offset=1)).unwrap()
    assert [row.package.name for row in paged] == ["widgets"]


@pytest.mark.asyncio
async def test_package_set_discontinued(runtime):
    package = (await runtime.packages.create("widgets")).unwrap()

    updated = (
        await runtime.packages.set_discontinued(package.id, discontinued=True, replaced_by="gears")
    ).unwrap()
    assert updated.is_discontinued and updated.replaced_by == "gears"

    restored = (await runtime.packages.set_discontinued(package.id, discontinued=False, replaced_by="gears")).unwrap()
    assert not restored.is_discontinued
    assert restored.replaced_by is None


@pytest.mark.asyncio
async def test_uploader_grants(runtime, identities):
    alice, bob = identities["alice"], identities["bob"]
    package = (await runtime.packages.create("widgets")).unwrap()

    assert isinstance(await runtime.uploaders.add_uploader(package.id, alice.user_id), Ok)
    assert isinstance(await runtime.uploaders.add_uploader(package.id, alice.user_id), Ok)
    await runtime.uploaders.add_uploader(package.id, bob.user_id)

    listed = (await runtime.uploaders.list_uploaders(package.id)).unwrap()
    assert sorted(user.email for user in listed) == ["alice@example.com", "bob@example.com"]

    assert isinstance(await runtime.uploaders.remove_uploader(package.id, bob.user_id), Ok)
    assert (await runtime.uploaders.can_publish(package.id, bob.user_id)).unwrap() is False
    missing = await runtime.uploaders.remove_uploader(package.id, bob.user_id)
    assert isinstance(missing, Err) and missing.error.kind is ErrorKind.NOT_FOUND

    await runtime.uploaders.remove_all_uploaders(package.id)
    assert (await runtime.uploaders.list_uploaders(package.id)).unwrap() == []


@pytest.mark.asyncio
async def test_grant_for_unknown_user_is_a_storage_error(runtime):
    package = (await runtime.packages.create("widgets")).unwrap()

    result = await runtime.uploaders.add_uploader(package.id, 9999)

    assert isinstance(result, Err)
    assert result.error.kind is ErrorKind.STORAGE
    assert (await runtime.uploaders.list_uploaders(package.id)).unwrap() == []


@pytest.mark.asyncio
async def test_users_are_found_by_token_hash(runtime, identities):
    user = (await runtime.users.get_by_token("alice-token")).unwrap()

    assert user.id == identities["alice"].user_id
    assert user.token_hash == hash_token("alice-token")
    assert user.token_hash != "alice-token"
    unknown = await runtime.users.get_by_token("nope")
    assert isinstance(unknown, Err) and unknown.error.kind is ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_users_reject_duplicate_email(runtime, identities):
    again = await runtime.users.create(email="alice@example.com", token="other")

    assert isinstance(again, Err)
    assert again.error.kind is ErrorKind.USER_EXISTS


@pytest.mark.asyncio
async def test_users_token_rotation_and_login(runtime, identities):
    alice = identities["alice"]

    await runtime.users.update_token(alice.user_id, "rotated")
    await runtime.users.record_login(alice.user_id)

    assert isinstance(await runtime.users.get_by_token("alice-token"), Err)
    user = (await runtime.users.get_by_token("rotated")).unwrap()
    assert user.last_login_at is not None
    many = (await runtime.users.get_many([alice.user_id, identities["bob"].user_id, 999])).unwrap()
    assert len(many) == 2


@pytest.mark.asyncio
async def test_audit_log_filters_and_order(runtime, identities):
    alice, bob = identities["alice"], identities["bob"]
    await runtime.audit_logs.create(user_id=alice.user_id, action="package.publish", resource_type="package", resource_id=1)
    await runtime.audit_logs.create(user_id=bob.user_id, action="package.version.publish", resource_type="version", resource_id=1)
    await runtime.audit_logs.create(user_id=alice.user_id, action="package.version.publish", resource_type="version", resource_id=2)

    everything = (await runtime.audit_logs.list()).unwrap()
    assert [entry.resource_id for entry in everything] == [2, 1, 1]

    by_alice = (await runtime.audit_logs.list(user_id=alice.user_id)).unwrap()
    assert {entry.action for entry in by_alice} == {"package.publish", "package.version.publish"}

    versions = (await runtime.audit_logs.list(resource_type="version", resource_id=1)).unwrap()
    assert [entry.user_id for entry in versions] == [bob.user_id]

    page = (await runtime.audit_logs.list(limit=1, offset=1)).unwrap()
    assert len(page) == 1 and page[0].user_id == bob.user_id
