from typing import Optional

from pydantic import BaseModel


class QualityControlDB(BaseModel):
    overall_rating: Optional[str] = None
    valuation_amount: float = 0.0
    chassis_punch: Optional[str] = None
    remarks: Optional[str] = None
