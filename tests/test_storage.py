import pytest

from registry_api.storage import (
    FileSystemBlobStore,
    InvalidBlobPathError,
    package_archive_relative_path,
)


@pytest.fixture
def store(tmp_path) -> FileSystemBlobStore:
    return FileSystemBlobStore(tmp_path / "blobs")


def test_package_archive_relative_path():
    assert package_archive_relative_path("widgets", "1.0.0") == "packages/widgets/1.0.0.tar.gz"


@pytest.mark.asyncio
async def test_put_then_get(store):
    assert await store.put("packages/widgets/1.0.0.tar.gz", b"payload") is True

    assert await store.get("packages/widgets/1.0.0.tar.gz") == b"payload"
    assert await store.exists("packages/widgets/1.0.0.tar.gz")
    assert (store.root / "packages" / "widgets" / "1.0.0.tar.gz").read_bytes() == b"payload"


@pytest.mark.asyncio
async def test_get_missing_returns_none(store):
    assert await store.get("packages/nothing.tar.gz") is None
    assert not await store.exists("packages/nothing.tar.gz")


@pytest.mark.asyncio
async def test_exclusive_put_keeps_existing_blob(store):
    assert await store.put("a/b.bin", b"first", overwrite=False) is True
    assert await store.put("a/b.bin", b"second", overwrite=False) is False

    assert await store.get("a/b.bin") == b"first"
    assert await store.list("a") == ["a/b.bin"]


@pytest.mark.asyncio
async def test_overwriting_put_replaces_blob(store):
    await store.put("a/b.bin", b"first")
    await store.put("a/b.bin", b"second")

    assert await store.get("a/b.bin") == b"second"


@pytest.mark.asyncio
async def test_delete_is_idempotent(store):
    await store.put("a/b.bin", b"first")

    await store.delete("a/b.bin")
    await store.delete("a/b.bin")

    assert await store.get("a/b.bin") is None


@pytest.mark.asyncio
async def test_list_filters_by_prefix(store):
    await store.put("packages/widgets/1.0.0.tar.gz", b"1")
    await store.put("packages/widgets/1.1.0.tar.gz", b"2")
    await store.put("packages/gears/0.1.0.tar.gz", b"3")

    assert await store.list("packages/widgets") == [
        "packages/widgets/1.0.0.tar.gz",
        "packages/widgets/1.1.0.tar.gz",
    ]
    assert len(await store.list()) == 3
    assert await store.list("packages/unknown") == []


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["../escape.bin", "/etc/passwd", "a/../../escape.bin", ""])
async def test_rejects_paths_outside_root(store, path):
    with pytest.raises(InvalidBlobPathError):
        await store.put(path, b"nope")
