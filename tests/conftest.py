import asyncio
import io
import tarfile
from typing import Callable, Dict, Iterator, Optional, Union

import pytest
from fastapi.testclient import TestClient

from registry_api.config.settings import RegistrySettings
from registry_api.db.session import create_database_engine, create_schema, create_session_factory
from registry_api.domain import Identity
from registry_api.main import create_app
from registry_api.repo.users import USER_STATUS_SUSPENDED, UserRepository
from registry_api.runtime import RegistryRuntime

TOKENS = {
    "alice": "alice-token",
    "bob": "bob-token",
    "admin": "admin-token",
    "mallory": "mallory-token",
}
ROOT_ADMIN_TOKEN = "root-token"

ArchiveBuilder = Callable[..., bytes]


def manifest_text(name: str = "widgets", version: str = "1.0.0", **extra: str) -> str:
    lines = [f"name: {name}", f"version: {version}"]
    lines.extend(f"{key}: {value}" for key, value in extra.items())
    return "\n".join(lines) + "\n"


def build_archive(
    files: Dict[str, Union[str, bytes]],
    *,
    symlinks: Optional[Dict[str, str]] = None,
) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for path, content in files.items():
            data = content.encode("utf-8") if isinstance(content, str) else content
            info = tarfile.TarInfo(path)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
        for path, target in (symlinks or {}).items():
            info = tarfile.TarInfo(path)
            info.type = tarfile.SYMTYPE
            info.linkname = target
            tar.addfile(info)
    return buffer.getvalue()


def package_archive(name: str = "widgets", version: str = "1.0.0", *, readme: str = "# Widgets\n") -> bytes:
    return build_archive(
        {
            "manifest.yaml": manifest_text(name, version, description="Useful widgets"),
            "README.md": readme,
            "CHANGELOG.md": f"## {version}\n- release\n",
            "lib/main.txt": f"{name} {version}",
        }
    )


@pytest.fixture
def make_archive() -> ArchiveBuilder:
    return package_archive


def _make_settings(tmp_path, **overrides) -> RegistrySettings:
    values = dict(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'registry.db'}",
        storage_root=tmp_path / "storage",
        docs_root=tmp_path / "docs",
        base_url="http://registry.test",
        run_migrations=False,
        admin_token=None,
        _env_file=None,
    )
    values.update(overrides)
    return RegistrySettings(**values)


@pytest.fixture
def settings(tmp_path) -> RegistrySettings:
    return _make_settings(tmp_path)


async def _seed_users(users: UserRepository) -> Dict[str, Identity]:
    identities: Dict[str, Identity] = {}
    for name, token in TOKENS.items():
        created = await users.create(
            email=f"{name}@example.com",
            token=token,
            display_name=name.title(),
            is_admin=name == "admin",
            status=USER_STATUS_SUSPENDED if name == "mallory" else "active",
        )
        record = created.unwrap()
        identities[name] = Identity(user_id=record.id, email=record.email, is_admin=record.is_admin)
    return identities


@pytest.fixture
async def runtime(settings) -> RegistryRuntime:
    registry = RegistryRuntime.from_settings(settings)
    await create_schema(registry.engine)
    yield registry
    await registry.jobs.join()
    await registry.supervisor.drain()
    await registry.aclose()


@pytest.fixture
async def identities(runtime) -> Dict[str, Identity]:
    return await _seed_users(runtime.users)


async def _prepare_database(settings: RegistrySettings) -> Dict[str, Identity]:
    engine = create_database_engine(settings.database_url)
    try:
        await create_schema(engine)
        return await _seed_users(UserRepository(create_session_factory(engine)))
    finally:
        await engine.dispose()


@pytest.fixture
def api_settings(tmp_path) -> RegistrySettings:
    return _make_settings(tmp_path, admin_token=ROOT_ADMIN_TOKEN)


@pytest.fixture
def api_users(api_settings) -> Dict[str, Identity]:
    return asyncio.run(_prepare_database(api_settings))


@pytest.fixture
def client(api_settings, api_users) -> Iterator[TestClient]:
    app = create_app(api_settings)
    with TestClient(app) as test_client:
        yield test_client


def auth(name: str) -> Dict[str, str]:
    token = ROOT_ADMIN_TOKEN if name == "root" else TOKENS[name]
    return {"Authorization": f"Bearer {token}"}


def settle(client: TestClient) -> None:
    """Wait for detached audit writes and queued jobs started by earlier requests."""

    runtime = client.app.state.runtime
    client.portal.call(runtime.supervisor.drain)
    client.portal.call(runtime.jobs.join)
