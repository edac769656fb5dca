from pydantic import BaseModel
from typing import Optional


class ApplicationRequest(BaseModel):
    operatorId: Optional[str] = None  # operator applying, or being accepted


class RejectionRequest(BaseModel):
    operatorId: Optional[str] = None
    reason: Optional[str] = None  # shown to the operator
