# Generic read / replace / delete handlers shared by every case section
import asyncio
import logging
import uuid
from typing import Any, Optional

from opentelemetry import trace

from vehicle_valuation_service.app.models import CaseKey
from vehicle_valuation_service.app.observability import section_writes_counter
from vehicle_valuation_service.app.service.exceptions import UploadFailureError
from vehicle_valuation_service.app.service.interfaces.blob_store import AbstractBlobStore
from vehicle_valuation_service.app.service.interfaces.valuation_repository import AbstractValuationRepository
from vehicle_valuation_service.app.service.mirroring import BackgroundMirror
from vehicle_valuation_service.app.service.sections.strategies import SectionStrategy, FileList, UploadedUrls
from vehicle_valuation_service.app.service.workflow import engine

logger = logging.getLogger(__name__)


def blob_path_hint(key: CaseKey, filename: str) -> str:
    return f"{key.vehicle_number}/{key.applicant_contact}/{uuid.uuid4()}-{filename}"


async def upload_files(blob_store: AbstractBlobStore, key: CaseKey, files: FileList) -> UploadedUrls:
    """Uploads all files concurrently. Any failure fails the whole batch with UploadFailureError."""
    if not files:
        return {}

    results = await asyncio.gather(
        *(blob_store.upload(f.data, f.content_type, blob_path_hint(key, f.filename)) for _, f in files),
        return_exceptions=True,
    )

    urls: UploadedUrls = {}
    for (field_name, upload), result in zip(files, results):
        if isinstance(result, BaseException):
            logger.error(f"Upload of {field_name} ({upload.filename}) failed for valuation {key.valuation_id}: {result}")
            raise UploadFailureError(field_name, str(result)) from result
        urls.setdefault(field_name, []).append(result)
    logger.info(f"Uploaded {len(files)} file(s) for valuation {key.valuation_id}")
    return urls


async def handle_get_section(repository: AbstractValuationRepository, section: SectionStrategy, key: CaseKey) -> Any:
    document = await repository.load(key)
    if document is None:
        return section.empty()
    value = getattr(document, section.attribute)
    return value if value is not None else section.empty()


async def handle_upsert_section(
    repository: AbstractValuationRepository,
    blob_store: AbstractBlobStore,
    section: SectionStrategy,
    key: CaseKey,
    payload: Any,
    mirror: Optional[BackgroundMirror] = None,
) -> Any:
    current_span = trace.get_current_span()
    current_span.set_attribute("command.name", f"section.{section.name}.upsert")
    current_span.set_attribute("valuation.id", key.valuation_id)

    section.validate(payload)
    document = await repository.load_or_create(key)
    created = document.is_new

    urls = await upload_files(blob_store, key, section.collect_files(payload))
    value = section.replace(document, payload, urls)
    setattr(document, section.attribute, value)

    if created or section.initializes_workflow:
        if engine.initialize_workflow(document):
            current_span.add_event("workflow.initialized", {"valuation.id": key.valuation_id})
            logger.info(f"Workflow initialized for valuation {key.valuation_id} by {section.name} write")

    saved = await repository.save(document)
    section_writes_counter.add(1, {"section": section.name, "operation": "upsert"})
    logger.info(f"Section {section.name} {'created' if created else 'replaced'} for valuation {key.valuation_id}")

    if section.mirrors_workflow and mirror is not None:
        steps = engine.in_progress_steps(saved) or engine.ordered_steps(saved)[:1]
        if steps:
            mirror.submit_step(saved, steps[0])
    return value


async def handle_delete_section(repository: AbstractValuationRepository, section: SectionStrategy, key: CaseKey):
    document = await repository.load(key)
    if document is None:
        logger.info(f"Delete of {section.name} ignored: valuation {key.valuation_id} does not exist")
        return

    setattr(document, section.attribute, None)
    await repository.save(document)
    section_writes_counter.add(1, {"section": section.name, "operation": "delete"})
    logger.info(f"Section {section.name} deleted for valuation {key.valuation_id}")
