import datetime
from typing import Optional

from pydantic import BaseModel, Field


class WorkflowTableUpdate(BaseModel):
    """Denormalized workflow position of a case, as written to the workflow table."""
    vehicle_number: str
    applicant_contact: str
    applicant_name: str = ""
    workflow: str # Role name of the current step, e.g. "Stakeholder"
    workflow_step_order: int
    status: str
    completed_at: Optional[datetime.datetime] = None
    assigned_to: Optional[str] = None
    location: Optional[str] = None
    red_flag: Optional[str] = None
    remarks: Optional[str] = None
    assigned_to_phone_number: Optional[str] = None
    assigned_to_email: Optional[str] = None
    assigned_to_whatsapp: Optional[str] = None
    stakeholder_name: Optional[str] = None
    valuation_type: Optional[str] = None


class WorkflowTableRecordDB(WorkflowTableUpdate):
    valuation_id: str
    partition_key: str
    created_at: datetime.datetime = Field(default_factory=lambda: datetime.datetime.now(datetime.UTC))
    updated_at: datetime.datetime = Field(default_factory=lambda: datetime.datetime.now(datetime.UTC))
