import datetime
from typing import List

from pydantic import BaseModel, Field

from .workflow_step_db import WorkflowStep


class OpenValuation(BaseModel):
    """Read-only projection of an open case and its in-progress steps; computed, never stored."""
    id: str
    vehicle_number: str
    applicant_name: str = ""
    applicant_contact: str
    created_at: datetime.datetime
    in_progress_workflow: List[WorkflowStep] = Field(default_factory=list)
