import asyncio
import logging

import pytest

from conftest import build_archive, manifest_text

from registry_api.jobs.docs import DOC_JOB_TYPE, DocGenerationJob, docs_relative_path
from registry_api.storage import FileSystemBlobStore, package_archive_relative_path
from registry_api.tasks import TaskSupervisor


@pytest.mark.asyncio
async def test_supervisor_logs_failures_without_raising(caplog):
    supervisor = TaskSupervisor()

    async def broken():
        raise RuntimeError("kaboom")

    async def fine():
        return 42

    with caplog.at_level(logging.ERROR, logger="registry_api.tasks"):
        supervisor.spawn(broken(), name="broken-task")
        supervisor.spawn(fine(), name="fine-task")
        await supervisor.drain()

    assert supervisor.pending == 0
    assert "Background task broken-task failed" in caplog.text


@pytest.mark.asyncio
async def test_supervisor_shutdown_cancels_stragglers():
    supervisor = TaskSupervisor()
    task = supervisor.spawn(asyncio.sleep(60), name="sleeper")

    await supervisor.shutdown(timeout=0.01)

    assert task.cancelled()
    assert supervisor.pending == 0


@pytest.mark.asyncio
async def test_doc_generation_job_renders_escaped_page(tmp_path):
    blobs = FileSystemBlobStore(tmp_path / "blobs")
    docs = FileSystemBlobStore(tmp_path / "docs")
    archive = build_archive(
        {
            "manifest.yaml": manifest_text(description='"<b>bold</b> widgets"', homepage="https://example.com"),
            "README.md": "Use <script>alert(1)</script> carefully",
        }
    )
    await blobs.put(package_archive_relative_path("widgets", "1.0.0"), archive)
    job = DocGenerationJob(package_name="widgets", version="1.0.0", blob_store=blobs, docs_store=docs)

    await job.execute()

    assert job.id == "widgets@1.0.0"
    assert job.type == DOC_JOB_TYPE
    page = (await docs.get(docs_relative_path("widgets", "1.0.0"))).decode("utf-8")
    assert "<title>widgets 1.0.0</title>" in page
    assert "&lt;b&gt;bold&lt;/b&gt; widgets" in page
    assert "&lt;script&gt;" in page
    assert "<script>" not in page
    assert "https://example.com" in page


@pytest.mark.asyncio
async def test_doc_generation_job_fails_without_archive(tmp_path):
    job = DocGenerationJob(
        package_name="widgets",
        version="1.0.0",
        blob_store=FileSystemBlobStore(tmp_path / "blobs"),
        docs_store=FileSystemBlobStore(tmp_path / "docs"),
    )

    with pytest.raises(FileNotFoundError):
        await job.execute()
