from pydantic import BaseModel, Field, StrictInt
from typing import List

HEX_DIGEST = r"^[0-9a-fA-F]{64}$"


class AddOracleRequest(BaseModel):
    identity: str
    initial_reputation: StrictInt = 0


class RegisterEntityRequest(BaseModel):
    identity: str
    name: str


class SubmitReportRequest(BaseModel):
    evidence_digest: str = Field(pattern=HEX_DIGEST)
    metrics: List[StrictInt]
    notes: str = ""
    severity: str = ""


class ValidateReportRequest(BaseModel):
    valid: bool


class AuditRequest(BaseModel):
    audit_type: str
    findings: List[StrictInt]
    recommendations: str = ""


class IntelligenceRequest(BaseModel):
    entities: List[str]
    prediction_horizon: StrictInt = 0
    framework: str = ""
