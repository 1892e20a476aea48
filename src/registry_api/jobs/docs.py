"""Static documentation page generated for each published version."""

from __future__ import annotations

import asyncio
import html
import logging

from registry_api.archive import ValidatedArchive, validate_archive
from registry_api.jobs.queue import Job
from registry_api.result import Err
from registry_api.storage import BlobStore, package_archive_relative_path

LOGGER = logging.getLogger(__name__)

DOC_JOB_TYPE = "doc_generation"


def docs_relative_path(name: str, version: str) -> str:
    return f"{name}/{version}/index.html"


def render_docs_page(archive: ValidatedArchive) -> str:
    title = html.escape(f"{archive.name} {archive.version}")
    rows = [
        ("Version", archive.version),
        ("Description", archive.description),
        ("Homepage", archive.homepage),
        ("Repository", archive.repository),
        ("License", archive.license),
    ]
    metadata = "\n".join(
        f"<tr><th>{html.escape(label)}</th><td>{html.escape(value)}</td></tr>"
        for label, value in rows
        if value
    )
    dependencies = "\n".join(
        f"<li><code>{html.escape(str(dep))}</code> {html.escape(str(constraint))}</li>"
        for dep, constraint in sorted(archive.dependencies.items(), key=lambda item: str(item[0]))
    )
    files = "\n".join(f"<li><code>{html.escape(path)}</code></li>" for path in sorted(archive.files))
    readme = html.escape(archive.readme) if archive.readme else "No README provided."
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
</head>
<body>
<h1>{title}</h1>
<table>
{metadata}
</table>
<h2>Dependencies</h2>
<ul>
{dependencies}
</ul>
<h2>README</h2>
<pre>{readme}</pre>
<h2>Files</h2>
<ul>
{files}
</ul>
</body>
</html>
"""


class DocGenerationJob(Job):
    """Render ``<name>/<version>/index.html`` into the docs store."""

    def __init__(
        self,
        *,
        package_name: str,
        version: str,
        blob_store: BlobStore,
        docs_store: BlobStore,
    ) -> None:
        super().__init__(job_id=f"{package_name}@{version}", job_type=DOC_JOB_TYPE)
        self.package_name = package_name
        self.version = version
        self._blob_store = blob_store
        self._docs_store = docs_store

    async def execute(self) -> None:
        data = await self._blob_store.get(package_archive_relative_path(self.package_name, self.version))
        if data is None:
            raise FileNotFoundError(
                f"Archive missing for {self.package_name}@{self.version}"
            )
        validated = await asyncio.to_thread(validate_archive, data)
        if isinstance(validated, Err):
            raise ValueError(f"Cannot document {self.package_name}@{self.version}: {validated.error}")
        page = await asyncio.to_thread(render_docs_page, validated.value)
        target = docs_relative_path(self.package_name, self.version)
        await self._docs_store.put(target, page.encode("utf-8"))
        LOGGER.debug("Wrote documentation for %s@%s to %s", self.package_name, self.version, target)


__all__ = ["DOC_JOB_TYPE", "DocGenerationJob", "docs_relative_path", "render_docs_page"]
