import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class StepStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"


class WorkflowRole(str, Enum):
    STAKEHOLDER = "Stakeholder"
    BACK_END = "BackEnd"
    AVO = "AVO"
    QC = "QC"
    FINAL_REPORT = "FinalReport"


class WorkflowStep(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    step_order: int # 1-based position, unique within a case
    template_step_id: int # Canonical step this is; equals step_order for the fixed template
    assigned_to_role: WorkflowRole
    status: StepStatus = StepStatus.PENDING
    started_at: Optional[datetime.datetime] = None
    completed_at: Optional[datetime.datetime] = None

    # Per-step annotations
    red_flag: Optional[str] = None
    remarks: Optional[str] = None
