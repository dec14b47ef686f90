from .case_key import CaseKey
from .file_upload import FileUpload
from .workflow_step_db import WorkflowStep, StepStatus, WorkflowRole
from .stakeholder_db import (
    StakeholderDB, StakeholderUpdate, StakeholderDocument, StakeholderDocumentsUpload,
    VehicleLocation, Applicant,
)
from .vehicle_details_db import VehicleDetailsDB, VehicleDetailsUpdate
from .inspection_details_db import InspectionDetailsDB, InspectionDetailsUpdate
from .quality_control_db import QualityControlDB
from .valuation_response_db import ValuationResponseDB
from .vehicle_photos import VEHICLE_PHOTO_SLOTS
from .valuation_document_db import ValuationDocumentDB, CaseStatus
from .open_valuation import OpenValuation
from .workflow_table_record_db import WorkflowTableRecordDB, WorkflowTableUpdate
from .rc_record import RcRecord

__all__ = [
    "CaseKey",
    "FileUpload",
    "WorkflowStep",
    "StepStatus",
    "WorkflowRole",
    "StakeholderDB",
    "StakeholderUpdate",
    "StakeholderDocument",
    "StakeholderDocumentsUpload",
    "VehicleLocation",
    "Applicant",
    "VehicleDetailsDB",
    "VehicleDetailsUpdate",
    "InspectionDetailsDB",
    "InspectionDetailsUpdate",
    "QualityControlDB",
    "ValuationResponseDB",
    "VEHICLE_PHOTO_SLOTS",
    "ValuationDocumentDB",
    "CaseStatus",
    "OpenValuation",
    "WorkflowTableRecordDB",
    "WorkflowTableUpdate",
    "RcRecord",
]
