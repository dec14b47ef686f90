"""
Custom exceptions for the Vehicle Valuation service.
"""
from typing import Optional


class BaseValuationError(Exception):
    """Base class for exceptions in this module."""
    pass

class NotFoundError(BaseValuationError):
    """Raised when a strictly addressed resource does not exist."""
    pass

class CaseNotFoundError(NotFoundError):
    """Raised when a valuation case is not found under its partition."""
    def __init__(self, valuation_id: str, partition_key: Optional[str] = None):
        self.valuation_id = valuation_id
        self.partition_key = partition_key
        if partition_key:
            message = f"Valuation case '{valuation_id}' not found in partition '{partition_key}'."
        else:
            message = f"Valuation case '{valuation_id}' not found."
        super().__init__(message)

class StepNotFoundError(NotFoundError):
    """Raised when a workflow step with the given order does not exist on a case."""
    def __init__(self, valuation_id: str, step_order: int):
        self.valuation_id = valuation_id
        self.step_order = step_order
        super().__init__(f"Workflow step {step_order} not found for valuation '{valuation_id}'.")

class RcRecordNotFoundError(NotFoundError):
    """Raised when the RC lookup service has no valid record for a registration number."""
    def __init__(self, registration_number: str):
        self.registration_number = registration_number
        super().__init__(f"No valid RC record found for registration number '{registration_number}'.")

class SequenceViolationError(BaseValuationError):
    """Raised when a workflow step is started before its predecessor is completed."""
    def __init__(self, valuation_id: str, step_order: int):
        self.valuation_id = valuation_id
        self.step_order = step_order
        super().__init__(
            f"Cannot start step {step_order} for valuation '{valuation_id}': "
            f"step {step_order - 1} is not completed."
        )

class InvalidTransitionError(BaseValuationError):
    """Raised when a workflow step transition is not allowed from its current status."""
    def __init__(self, valuation_id: str, step_order: int, current_status: str, attempted_action: str):
        self.valuation_id = valuation_id
        self.step_order = step_order
        self.current_status = current_status
        self.attempted_action = attempted_action
        super().__init__(
            f"Cannot {attempted_action} step {step_order} for valuation '{valuation_id}' "
            f"in status '{current_status}'."
        )

class UploadFailureError(BaseValuationError):
    """Raised when a file upload to the blob store fails; the section write is aborted."""
    def __init__(self, field_name: str, reason: str):
        self.field_name = field_name
        self.reason = reason
        super().__init__(f"Upload of '{field_name}' failed: {reason}")

class UpstreamUnavailableError(BaseValuationError):
    """Raised when an external collaborator (RC lookup, AI valuation) cannot be reached or fails."""
    def __init__(self, service_name: str, reason: str):
        self.service_name = service_name
        self.reason = reason
        super().__init__(f"Upstream service '{service_name}' unavailable: {reason}")

class ConcurrencyConflictError(BaseValuationError):
    """Raised when a version conflict is detected while saving a case document."""
    def __init__(self, aggregate_id: str, expected_version: int, actual_version: Optional[int]):
        self.aggregate_id = aggregate_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Concurrency conflict for valuation '{aggregate_id}'. "
            f"Expected version {expected_version}, but found {actual_version}."
        )
