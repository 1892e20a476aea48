import asyncio
import hashlib

import pytest

from conftest import build_archive, manifest_text, package_archive

from registry_api.domain import ClientInfo
from registry_api.errors import ErrorKind, FailureKind, RegistryError
from registry_api.jobs.docs import docs_relative_path
from registry_api.result import Err, Ok
from registry_api.services.audit import (
    ACTION_PACKAGE_PUBLISH,
    ACTION_VERSION_PUBLISH,
    RESOURCE_PACKAGE,
    RESOURCE_VERSION,
)
from registry_api.services.publish import PublishOrchestrator, archive_url_for
from registry_api.storage import package_archive_relative_path

CLIENT = ClientInfo(ip_address="203.0.113.7", user_agent="pytest")


async def _publish(runtime, identity, data):
    return await runtime.publisher.publish(data, identity=identity, client=CLIENT)


def _failure_kind(result):
    assert isinstance(result, Err), result
    return result.error.kind


@pytest.mark.asyncio
async def test_first_publish_creates_package_and_grants_publisher(runtime, identities):
    alice = identities["alice"]
    data = package_archive("widgets", "1.0.0")

    result = await _publish(runtime, alice, data)

    assert isinstance(result, Ok)
    receipt = result.value
    assert receipt.is_new_package
    assert receipt.message == "Successfully uploaded widgets@1.0.0"
    assert receipt.archive_sha256 == hashlib.sha256(data).hexdigest()
    assert receipt.archive_url == "http://registry.test/packages/widgets/versions/1.0.0.tar.gz"

    package = (await runtime.packages.get_by_name("widgets")).unwrap()
    assert package.description == "Useful widgets"
    uploaders = (await runtime.uploaders.list_uploaders(package.id)).unwrap()
    assert [user.id for user in uploaders] == [alice.user_id]

    version = (await runtime.versions.get(package.id, "1.0.0")).unwrap()
    assert version.readme == "# Widgets\n"
    assert version.changelog.startswith("## 1.0.0")
    assert version.archive_sha256 == receipt.archive_sha256
    assert await runtime.blob_store.get(package_archive_relative_path("widgets", "1.0.0")) == data


@pytest.mark.asyncio
async def test_publish_records_audit_entries(runtime, identities):
    alice = identities["alice"]
    await _publish(runtime, alice, package_archive("widgets", "1.0.0"))
    await _publish(runtime, alice, package_archive("widgets", "1.1.0"))
    await runtime.supervisor.drain()

    entries = (await runtime.audit_logs.list(user_id=alice.user_id)).unwrap()
    package = (await runtime.packages.get_by_name("widgets")).unwrap()

    assert [(entry.action, entry.resource_type) for entry in entries] == [
        (ACTION_VERSION_PUBLISH, RESOURCE_VERSION),
        (ACTION_PACKAGE_PUBLISH, RESOURCE_PACKAGE),
    ]
    assert {entry.resource_id for entry in entries} == {package.id}
    assert entries[0].ip_address == "203.0.113.7"
    assert entries[0].user_agent == "pytest"


@pytest.mark.asyncio
async def test_publish_enqueues_documentation(runtime, identities):
    await _publish(runtime, identities["alice"], package_archive("widgets", "1.0.0"))
    await runtime.jobs.join()

    page = await runtime.docs_store.get(docs_relative_path("widgets", "1.0.0"))

    assert page is not None
    assert b"widgets 1.0.0" in page


@pytest.mark.asyncio
async def test_widgets_ownership_scenario(runtime, identities):
    alice, bob, admin = identities["alice"], identities["bob"], identities["admin"]

    assert isinstance(await _publish(runtime, alice, package_archive("widgets", "1.0.0")), Ok)

    denied = await _publish(runtime, bob, package_archive("widgets", "1.1.0"))
    assert _failure_kind(denied) is FailureKind.FORBIDDEN
    assert denied.error.message == "You do not have permission to publish to this package"
    assert not await runtime.blob_store.exists(package_archive_relative_path("widgets", "1.1.0"))

    by_admin = await _publish(runtime, admin, package_archive("widgets", "1.1.0"))
    assert isinstance(by_admin, Ok)
    assert not by_admin.value.is_new_package

    package = (await runtime.packages.get_by_name("widgets")).unwrap()
    uploaders = (await runtime.uploaders.list_uploaders(package.id)).unwrap()
    assert [user.id for user in uploaders] == [alice.user_id]
    latest = (await runtime.versions.get_latest(package.id)).unwrap()
    assert latest.version == "1.1.0"


@pytest.mark.asyncio
async def test_republishing_a_version_conflicts_and_keeps_original(runtime, identities):
    alice = identities["alice"]
    original = package_archive("widgets", "1.0.0")
    await _publish(runtime, alice, original)

    again = await _publish(runtime, alice, package_archive("widgets", "1.0.0", readme="changed"))

    assert _failure_kind(again) is FailureKind.CONFLICT
    assert again.error.message == "Version 1.0.0 of package widgets already exists"
    assert await runtime.blob_store.get(package_archive_relative_path("widgets", "1.0.0")) == original
    package = (await runtime.packages.get_by_name("widgets")).unwrap()
    version = (await runtime.versions.get(package.id, "1.0.0")).unwrap()
    assert version.archive_sha256 == hashlib.sha256(original).hexdigest()


@pytest.mark.asyncio
async def test_concurrent_publish_of_same_version_has_one_winner(runtime, identities):
    alice = identities["alice"]
    await _publish(runtime, alice, package_archive("widgets", "1.0.0"))
    first = package_archive("widgets", "2.0.0", readme="first")
    second = package_archive("widgets", "2.0.0", readme="second")

    results = await asyncio.gather(
        _publish(runtime, alice, first),
        _publish(runtime, alice, second),
    )

    winners = [result for result in results if isinstance(result, Ok)]
    losers = [result for result in results if isinstance(result, Err)]
    assert len(winners) == 1
    assert [loser.error.kind for loser in losers] == [FailureKind.CONFLICT]

    package = (await runtime.packages.get_by_name("widgets")).unwrap()
    versions = (await runtime.versions.list_for_package(package.id)).unwrap()
    assert sorted(record.version for record in versions) == ["1.0.0", "2.0.0"]
    stored = await runtime.blob_store.get(package_archive_relative_path("widgets", "2.0.0"))
    assert hashlib.sha256(stored).hexdigest() == winners[0].value.archive_sha256


@pytest.mark.asyncio
async def test_concurrent_first_publish_creates_one_package(runtime, identities):
    results = await asyncio.gather(
        _publish(runtime, identities["alice"], package_archive("gadgets", "1.0.0", readme="a")),
        _publish(runtime, identities["bob"], package_archive("gadgets", "1.0.0", readme="b")),
    )

    winners = [result for result in results if isinstance(result, Ok)]
    assert len(winners) == 1
    package = (await runtime.packages.get_by_name("gadgets")).unwrap()
    versions = (await runtime.versions.list_for_package(package.id)).unwrap()
    assert [record.version for record in versions] == ["1.0.0"]
    uploaders = (await runtime.uploaders.list_uploaders(package.id)).unwrap()
    assert len(uploaders) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data, message",
    [
        (b"", "Upload body is empty."),
        (b"not an archive", "Invalid package: "),
        (build_archive({"README.md": "no manifest"}), "Invalid package: manifest.yaml not found in archive"),
        (
            build_archive({"manifest.yaml": manifest_text(name="Bad-Name")}),
            "Invalid package: Invalid package name: Bad-Name",
        ),
        (
            build_archive({"manifest.yaml": manifest_text(version='"1.0"')}),
            "Invalid package: Invalid semantic version: 1.0",
        ),
        (
            build_archive({"manifest.yaml": 'name: "widgets\\n"\nversion: 1.0.0\n'}),
            "Invalid package: Invalid package name: widgets\n",
        ),
    ],
)
async def test_invalid_uploads_are_bad_requests(runtime, identities, data, message):
    result = await _publish(runtime, identities["alice"], data)

    assert _failure_kind(result) is FailureKind.BAD_REQUEST
    assert result.error.message.startswith(message)
    assert await runtime.blob_store.list() == []
    assert (await runtime.packages.list_all()).unwrap() == []


@pytest.mark.asyncio
async def test_oversized_upload_is_rejected(runtime, identities):
    publisher = PublishOrchestrator(
        packages=runtime.packages,
        versions=runtime.versions,
        uploaders=runtime.uploaders,
        blob_store=runtime.blob_store,
        docs_store=runtime.docs_store,
        audit=runtime.audit,
        jobs=runtime.jobs,
        base_url="http://registry.test",
        max_upload_bytes=16,
    )

    result = await publisher.publish(package_archive(), identity=identities["alice"], client=CLIENT)

    assert _failure_kind(result) is FailureKind.BAD_REQUEST
    assert result.error.message == "Upload exceeds the maximum size of 16 bytes."


@pytest.mark.asyncio
async def test_failed_version_insert_removes_stored_blob(runtime, identities, monkeypatch):
    alice = identities["alice"]
    await _publish(runtime, alice, package_archive("widgets", "1.0.0"))

    async def broken_create(**kwargs):
        return Err(RegistryError(ErrorKind.STORAGE, "Database error: disk full"))

    monkeypatch.setattr(runtime.versions, "create", broken_create)

    result = await _publish(runtime, alice, package_archive("widgets", "1.1.0"))

    assert _failure_kind(result) is FailureKind.INTERNAL
    assert result.error.message == "Internal server error."
    assert not await runtime.blob_store.exists(package_archive_relative_path("widgets", "1.1.0"))


@pytest.mark.asyncio
async def test_publish_succeeds_when_job_queue_is_closed(runtime, identities):
    await runtime.jobs.shutdown()

    result = await _publish(runtime, identities["alice"], package_archive("widgets", "1.0.0"))

    assert isinstance(result, Ok)
    assert await runtime.docs_store.get(docs_relative_path("widgets", "1.0.0")) is None


def test_archive_url_for_trims_trailing_slash():
    assert archive_url_for("https://r.example/", "widgets", "1.0.0") == (
        "https://r.example/packages/widgets/versions/1.0.0.tar.gz"
    )


@pytest.mark.asyncio
async def test_discontinued_package_still_accepts_versions(runtime, identities):
    alice = identities["alice"]
    first = (await _publish(runtime, alice, package_archive("widgets", "1.0.0"))).unwrap()
    await runtime.packages.set_discontinued(first.package_id, discontinued=True, replaced_by="gears")

    result = await _publish(runtime, alice, package_archive("widgets", "1.1.0"))

    assert isinstance(result, Ok)
    package = (await runtime.packages.get_by_name("widgets")).unwrap()
    assert package.is_discontinued
