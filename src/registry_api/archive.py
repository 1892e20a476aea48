"""Validation of uploaded package archives.

An archive is a gzip-compressed tar stream carrying a ``manifest.yaml`` at
its root or inside a single wrapping directory. Everything happens in
memory: members are never extracted to disk and only regular files are
read, so symlinks and hard links inside untrusted uploads are ignored.
"""

from __future__ import annotations

import io
import re
import tarfile
import zlib
from dataclasses import dataclass, field
from typing import Any, Optional

import yaml

from registry_api.errors import ErrorKind, RegistryError
from registry_api.result import Err, Ok, Result
from registry_api.versioning import is_valid_version

MANIFEST_FILENAME = "manifest.yaml"
README_FILENAME = "README.md"
CHANGELOG_FILENAME = "CHANGELOG.md"
NAME_PATTERN = re.compile(r"[a-z][a-z0-9_]*")
MAX_TEXT_MEMBER_BYTES = 1024 * 1024


@dataclass(frozen=True)
class ValidatedArchive:
    name: str
    version: str
    manifest_text: str
    manifest: dict[str, Any]
    description: Optional[str] = None
    homepage: Optional[str] = None
    repository: Optional[str] = None
    license: Optional[str] = None
    dependencies: dict[str, Any] = field(default_factory=dict)
    readme: Optional[str] = None
    changelog: Optional[str] = None
    files: tuple[str, ...] = ()


def _error(kind: ErrorKind, message: str) -> Err[RegistryError]:
    return Err(RegistryError(kind, message))


def _member_parts(member_name: str) -> Optional[tuple[str, ...]]:
    parts = tuple(part for part in member_name.split("/") if part and part != ".")
    if not parts or ".." in parts:
        return None
    return parts


def _index_regular_files(
    tar: tarfile.TarFile,
) -> dict[tuple[str, ...], tarfile.TarInfo]:
    files: dict[tuple[str, ...], tarfile.TarInfo] = {}
    for member in tar.getmembers():
        if not member.isfile():
            continue
        parts = _member_parts(member.name)
        if parts is None:
            continue
        files.setdefault(parts, member)
    return files


def _find_manifest(files: dict[tuple[str, ...], tarfile.TarInfo]) -> Optional[tuple[str, ...]]:
    if (MANIFEST_FILENAME,) in files:
        return (MANIFEST_FILENAME,)
    for parts in files:
        if len(parts) == 2 and parts[1] == MANIFEST_FILENAME:
            return parts
    return None


def _read_text(tar: tarfile.TarFile, member: tarfile.TarInfo) -> Optional[str]:
    if member.size > MAX_TEXT_MEMBER_BYTES:
        return None
    handle = tar.extractfile(member)
    if handle is None:
        return None
    with handle:
        raw = handle.read(MAX_TEXT_MEMBER_BYTES + 1)
    if len(raw) > MAX_TEXT_MEMBER_BYTES:
        return None
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return None


def _optional_str(manifest: dict[str, Any], key: str) -> Optional[str]:
    value = manifest.get(key)
    return value if isinstance(value, str) else None


def _parse_manifest(text: str) -> Result[dict[str, Any], RegistryError]:
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        return _error(ErrorKind.MANIFEST_INVALID, f"Unable to parse {MANIFEST_FILENAME}: {exc}")
    if not isinstance(document, dict):
        return _error(ErrorKind.MANIFEST_INVALID, f"{MANIFEST_FILENAME} must be a mapping.")
    name = document.get("name")
    version = document.get("version")
    if not isinstance(name, str) or not name:
        return _error(
            ErrorKind.MANIFEST_INVALID,
            f'Missing or invalid "name" in {MANIFEST_FILENAME}',
        )
    if not isinstance(version, str) or not version:
        return _error(
            ErrorKind.MANIFEST_INVALID,
            f'Missing or invalid "version" in {MANIFEST_FILENAME}',
        )
    return Ok(document)


def validate_archive(data: bytes) -> Result[ValidatedArchive, RegistryError]:
    """Inspect ``data`` and return the manifest fields needed for publishing."""

    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as tar:
            files = _index_regular_files(tar)
            manifest_parts = _find_manifest(files)
            if manifest_parts is None:
                return _error(
                    ErrorKind.MANIFEST_MISSING,
                    f"{MANIFEST_FILENAME} not found in archive",
                )
            manifest_member = files[manifest_parts]
            if manifest_member.size > MAX_TEXT_MEMBER_BYTES:
                return _error(ErrorKind.MANIFEST_INVALID, f"{MANIFEST_FILENAME} is too large.")
            manifest_text = _read_text(tar, manifest_member)
            if manifest_text is None:
                return _error(ErrorKind.MANIFEST_INVALID, f"{MANIFEST_FILENAME} is not valid UTF-8.")

            base = manifest_parts[:-1]
            readme_member = files.get(base + (README_FILENAME,))
            changelog_member = files.get(base + (CHANGELOG_FILENAME,))
            readme = _read_text(tar, readme_member) if readme_member else None
            changelog = _read_text(tar, changelog_member) if changelog_member else None
            listing = tuple("/".join(parts) for parts in files)
    except (tarfile.TarError, EOFError, OSError, zlib.error) as exc:
        return _error(ErrorKind.MALFORMED_ARCHIVE, f"Invalid package archive: {exc}")

    parsed = _parse_manifest(manifest_text)
    if isinstance(parsed, Err):
        return parsed
    manifest = parsed.value
    name: str = manifest["name"]
    version: str = manifest["version"]

    if not NAME_PATTERN.fullmatch(name):
        return _error(ErrorKind.INVALID_NAME, f"Invalid package name: {name}")
    if not is_valid_version(version):
        return _error(ErrorKind.INVALID_VERSION, f"Invalid semantic version: {version}")

    dependencies = manifest.get("dependencies")
    return Ok(
        ValidatedArchive(
            name=name,
            version=version,
            manifest_text=manifest_text,
            manifest=manifest,
            description=_optional_str(manifest, "description"),
            homepage=_optional_str(manifest, "homepage"),
            repository=_optional_str(manifest, "repository"),
            license=_optional_str(manifest, "license"),
            dependencies=dict(dependencies) if isinstance(dependencies, dict) else {},
            readme=readme,
            changelog=changelog,
            files=listing,
        )
    )


__all__ = [
    "CHANGELOG_FILENAME",
    "MANIFEST_FILENAME",
    "NAME_PATTERN",
    "README_FILENAME",
    "ValidatedArchive",
    "validate_archive",
]
