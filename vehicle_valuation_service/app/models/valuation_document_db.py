import datetime
from enum import Enum
from typing import Optional, List, Dict

from pydantic import BaseModel, ConfigDict, Field

from .case_key import CaseKey
from .inspection_details_db import InspectionDetailsDB
from .quality_control_db import QualityControlDB
from .stakeholder_db import StakeholderDB
from .valuation_response_db import ValuationResponseDB
from .vehicle_details_db import VehicleDetailsDB
from .workflow_step_db import WorkflowStep


class CaseStatus(str, Enum):
    OPEN = "Open"
    COMPLETED = "Completed"
    DELETED = "Deleted"


class ValuationDocumentDB(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    id: str
    partition_key: str # "{vehicle_number}|{applicant_contact}"
    vehicle_number: str
    applicant_contact: str
    status: CaseStatus = CaseStatus.OPEN

    stakeholder: Optional[StakeholderDB] = None
    vehicle_details: Optional[VehicleDetailsDB] = None
    inspection_details: Optional[InspectionDetailsDB] = None
    quality_control: Optional[QualityControlDB] = None
    valuation_response: Optional[ValuationResponseDB] = None
    photo_urls: Optional[Dict[str, str]] = None
    workflow: Optional[List[WorkflowStep]] = None

    version: int = 0 # Incremented on every save; 0 means never stored

    created_at: datetime.datetime = Field(default_factory=lambda: datetime.datetime.now(datetime.UTC))
    updated_at: datetime.datetime = Field(default_factory=lambda: datetime.datetime.now(datetime.UTC))
    completed_at: Optional[datetime.datetime] = None
    deleted_at: Optional[datetime.datetime] = None

    @classmethod
    def new(cls, key: CaseKey) -> "ValuationDocumentDB":
        return cls(
            id=key.valuation_id,
            partition_key=key.partition_key,
            vehicle_number=key.vehicle_number,
            applicant_contact=key.applicant_contact,
        )

    @property
    def key(self) -> CaseKey:
        return CaseKey(
            valuation_id=self.id,
            vehicle_number=self.vehicle_number,
            applicant_contact=self.applicant_contact,
        )

    @property
    def is_new(self) -> bool:
        return self.version == 0
