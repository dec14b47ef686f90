from pydantic import BaseModel, ConfigDict


class CaseKey(BaseModel):
    """Identity of a valuation case: its id plus the two fields the partition is derived from."""
    model_config = ConfigDict(frozen=True)

    valuation_id: str
    vehicle_number: str
    applicant_contact: str

    @property
    def partition_key(self) -> str:
        return f"{self.vehicle_number}|{self.applicant_contact}"
