from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple

from vehicle_valuation_service.app.models import (
    ValuationDocumentDB, FileUpload, VEHICLE_PHOTO_SLOTS,
    StakeholderDB, StakeholderUpdate, StakeholderDocument, StakeholderDocumentsUpload, Applicant,
    VehicleDetailsDB, VehicleDetailsUpdate,
    InspectionDetailsDB, InspectionDetailsUpdate,
    QualityControlDB, ValuationResponseDB,
)

# (field name, file) pairs in upload order
FileList = List[Tuple[str, FileUpload]]
# field name -> URLs of the files uploaded for it, in upload order
UploadedUrls = Dict[str, List[str]]


class SectionStrategy(ABC):
    """
    How one sub-section of the case document is read, defaulted and rebuilt
    from a write payload. The generic section handlers drive every section
    through this interface.
    """
    name: str
    attribute: str # Field of ValuationDocumentDB holding the section
    initializes_workflow: bool = False # Re-create a missing workflow on existing cases
    mirrors_workflow: bool = False # Write the case's workflow position to the workflow table

    @abstractmethod
    def empty(self) -> Any:
        pass

    def validate(self, payload: Any):
        pass

    def collect_files(self, payload: Any) -> FileList:
        return []

    @abstractmethod
    def replace(self, document: ValuationDocumentDB, payload: Any, urls: UploadedUrls) -> Any:
        """Builds the new section value from the payload and the URLs of its uploaded files."""
        pass


def _stakeholder_files(payload) -> FileList:
    files: FileList = []
    if payload.rc_file is not None:
        files.append(("rc_file", payload.rc_file))
    if payload.insurance_file is not None:
        files.append(("insurance_file", payload.insurance_file))
    files.extend(("other_files", f) for f in payload.other_files)
    return files


def _stakeholder_documents(urls: UploadedUrls) -> List[StakeholderDocument]:
    documents = []
    for field_name, doc_type in (("rc_file", "RC"), ("insurance_file", "Insurance"), ("other_files", "Other")):
        for url in urls.get(field_name, []):
            documents.append(StakeholderDocument(type=doc_type, file_path=url))
    return documents


class StakeholderStrategy(SectionStrategy):
    name = "stakeholder"
    attribute = "stakeholder"
    initializes_workflow = True
    mirrors_workflow = True

    def empty(self) -> StakeholderDB:
        return StakeholderDB()

    def collect_files(self, payload: StakeholderUpdate) -> FileList:
        return _stakeholder_files(payload)

    def replace(self, document: ValuationDocumentDB, payload: StakeholderUpdate, urls: UploadedUrls) -> StakeholderDB:
        return StakeholderDB(
            name=payload.name,
            executive_name=payload.executive_name,
            executive_contact=payload.executive_contact,
            executive_whatsapp=payload.executive_whatsapp,
            executive_email=payload.executive_email,
            valuation_type=payload.valuation_type,
            vehicle_segment=payload.vehicle_segment,
            vehicle_location=payload.vehicle_location,
            applicant=Applicant(name=payload.applicant_name, contact=document.applicant_contact),
            documents=_stakeholder_documents(urls),
        )


class StakeholderDocumentsStrategy(SectionStrategy):
    """Replaces only the document list of the stakeholder section."""
    name = "stakeholder_documents"
    attribute = "stakeholder"

    def empty(self) -> StakeholderDB:
        return StakeholderDB()

    def collect_files(self, payload: StakeholderDocumentsUpload) -> FileList:
        return _stakeholder_files(payload)

    def replace(self, document: ValuationDocumentDB, payload: StakeholderDocumentsUpload, urls: UploadedUrls) -> StakeholderDB:
        current = document.stakeholder or StakeholderDB(applicant=Applicant(contact=document.applicant_contact))
        return current.model_copy(update={"documents": _stakeholder_documents(urls)})


class VehicleDetailsStrategy(SectionStrategy):
    name = "vehicle_details"
    attribute = "vehicle_details"
    initializes_workflow = True

    def empty(self) -> VehicleDetailsDB:
        return VehicleDetailsDB()

    def collect_files(self, payload: VehicleDetailsUpdate) -> FileList:
        files: FileList = []
        if payload.stencil_trace is not None:
            files.append(("stencil_trace", payload.stencil_trace))
        if payload.chassis_no_photo is not None:
            files.append(("chassis_no_photo", payload.chassis_no_photo))
        return files

    def replace(self, document: ValuationDocumentDB, payload: VehicleDetailsUpdate, urls: UploadedUrls) -> VehicleDetailsDB:
        details = VehicleDetailsDB(**payload.model_dump())
        if urls.get("stencil_trace"):
            details.stencil_trace_url = urls["stencil_trace"][0]
        if urls.get("chassis_no_photo"):
            details.chassis_no_photo_url = urls["chassis_no_photo"][0]
        return details


class InspectionDetailsStrategy(SectionStrategy):
    name = "inspection_details"
    attribute = "inspection_details"

    def empty(self) -> InspectionDetailsDB:
        return InspectionDetailsDB()

    def collect_files(self, payload: InspectionDetailsUpdate) -> FileList:
        return [("photos", f) for f in payload.photos]

    def replace(self, document: ValuationDocumentDB, payload: InspectionDetailsUpdate, urls: UploadedUrls) -> InspectionDetailsDB:
        details = InspectionDetailsDB(**payload.model_dump())
        details.photo_urls = list(payload.photo_urls) + urls.get("photos", [])
        return details


class QualityControlStrategy(SectionStrategy):
    name = "quality_control"
    attribute = "quality_control"

    def empty(self) -> QualityControlDB:
        return QualityControlDB()

    def replace(self, document: ValuationDocumentDB, payload: QualityControlDB, urls: UploadedUrls) -> QualityControlDB:
        return QualityControlDB(**payload.model_dump())


class ValuationResponseStrategy(SectionStrategy):
    name = "valuation_response"
    attribute = "valuation_response"

    def empty(self) -> ValuationResponseDB:
        return ValuationResponseDB()

    def replace(self, document: ValuationDocumentDB, payload: ValuationResponseDB, urls: UploadedUrls) -> ValuationResponseDB:
        return ValuationResponseDB(**payload.model_dump())


class VehiclePhotosStrategy(SectionStrategy):
    """Photo map keyed by slot name; only slots carrying a new file change."""
    name = "photos"
    attribute = "photo_urls"

    def empty(self) -> Dict[str, str]:
        return {}

    def validate(self, payload: Dict[str, FileUpload]):
        unknown = sorted(slot for slot in payload if slot not in VEHICLE_PHOTO_SLOTS)
        if unknown:
            raise ValueError(f"Unknown photo slot(s): {', '.join(unknown)}")

    def collect_files(self, payload: Dict[str, FileUpload]) -> FileList:
        return [(slot, payload[slot]) for slot in VEHICLE_PHOTO_SLOTS if slot in payload]

    def replace(self, document: ValuationDocumentDB, payload: Dict[str, FileUpload], urls: UploadedUrls) -> Dict[str, str]:
        photo_urls = dict(document.photo_urls or {})
        for slot, slot_urls in urls.items():
            photo_urls[slot] = slot_urls[-1]
        return photo_urls


SECTION_STRATEGIES: Dict[str, SectionStrategy] = {
    strategy.name: strategy
    for strategy in (
        StakeholderStrategy(),
        StakeholderDocumentsStrategy(),
        VehicleDetailsStrategy(),
        InspectionDetailsStrategy(),
        QualityControlStrategy(),
        ValuationResponseStrategy(),
        VehiclePhotosStrategy(),
    )
}


def get_section_strategy(name: str) -> SectionStrategy:
    try:
        return SECTION_STRATEGIES[name]
    except KeyError:
        raise ValueError(f"Unknown case section '{name}'.")
