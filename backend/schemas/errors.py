from pydantic import BaseModel
from typing import List, Optional


class ReasonOut(BaseModel):
    code: str
    message: str


class ValidationErrorOut(BaseModel):
    detail: str
    reasons: List[ReasonOut] = []


class ServerErrorOut(BaseModel):
    detail: str
    retryable: Optional[bool] = None
