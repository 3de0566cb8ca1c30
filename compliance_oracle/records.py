"""
Compliance Oracle Data Model

Registry rows for oracles, entities, reports, audits and escalations.
Every record serializes to a plain dict (for storage and transport) and
rebuilds from one.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, List, Optional


class ComplianceStatus(str, Enum):
    """Derived entity status."""
    PENDING = "PENDING"
    COMPLIANT = "COMPLIANT"
    NON_COMPLIANT = "NON_COMPLIANT"
    CRITICAL = "CRITICAL"


class RiskCategory(str, Enum):
    """Coarse risk classification derived from score and violations."""
    UNKNOWN = "UNKNOWN"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class EscalationStatus(str, Enum):
    """
    Escalation workflow states.

    Only PENDING is ever assigned; the remaining states belong to the
    resolution workflow, which has no operations yet.
    """
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    RESOLVED = "RESOLVED"


class Trend(str, Enum):
    IMPROVING = "IMPROVING"
    STABLE = "STABLE"
    DECLINING = "DECLINING"


@dataclass
class Oracle:
    """An authorized attestation provider and its reputation."""
    identity: str
    active: bool
    reputation_score: int
    total_reports: int = 0
    last_activity: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Oracle':
        return cls(
            identity=data["identity"],
            active=bool(data["active"]),
            reputation_score=int(data["reputation_score"]),
            total_reports=int(data.get("total_reports", 0)),
            last_activity=int(data.get("last_activity", 0)),
        )


@dataclass
class Entity:
    """A tracked subject and its current derived state."""
    identity: str
    name: str
    compliance_score: int = 0
    last_updated: int = 0
    status: ComplianceStatus = ComplianceStatus.PENDING
    violations: int = 0
    risk_category: RiskCategory = RiskCategory.UNKNOWN
    next_audit_due: int = 0
    escalation_level: int = 0

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["status"] = self.status.value
        d["risk_category"] = self.risk_category.value
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Entity':
        return cls(
            identity=data["identity"],
            name=data["name"],
            compliance_score=int(data.get("compliance_score", 0)),
            last_updated=int(data.get("last_updated", 0)),
            status=ComplianceStatus(data.get("status", "PENDING")),
            violations=int(data.get("violations", 0)),
            risk_category=RiskCategory(data.get("risk_category", "UNKNOWN")),
            next_audit_due=int(data.get("next_audit_due", 0)),
            escalation_level=int(data.get("escalation_level", 0)),
        )


@dataclass
class Report:
    """
    One oracle attestation.

    Immutable except for ``validated``, which the administrator may
    overwrite through report validation.
    """
    entity: str
    report_id: int
    oracle: str
    timestamp: int
    evidence_digest: bytes
    metrics: List[int]
    notes: str
    severity: str
    validated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entity": self.entity,
            "report_id": self.report_id,
            "oracle": self.oracle,
            "timestamp": self.timestamp,
            "evidence_digest": self.evidence_digest.hex(),
            "metrics": list(self.metrics),
            "notes": self.notes,
            "severity": self.severity,
            "validated": self.validated,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Report':
        return cls(
            entity=data["entity"],
            report_id=int(data["report_id"]),
            oracle=data["oracle"],
            timestamp=int(data["timestamp"]),
            evidence_digest=bytes.fromhex(data["evidence_digest"]),
            metrics=[int(m) for m in data["metrics"]],
            notes=data.get("notes", ""),
            severity=data.get("severity", ""),
            validated=bool(data.get("validated", False)),
        )


@dataclass(frozen=True)
class Audit:
    """An independent audit finding set. Immutable once written."""
    entity: str
    audit_id: int
    auditor: str
    audit_type: str
    findings: List[int]
    recommendations: str
    follow_up_required: bool
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["findings"] = list(self.findings)
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Audit':
        return cls(
            entity=data["entity"],
            audit_id=int(data["audit_id"]),
            auditor=data["auditor"],
            audit_type=data["audit_type"],
            findings=[int(f) for f in data["findings"]],
            recommendations=data.get("recommendations", ""),
            follow_up_required=bool(data["follow_up_required"]),
            timestamp=int(data["timestamp"]),
        )


@dataclass
class Escalation:
    """A remediation workflow item raised by a CRITICAL status transition."""
    entity: str
    escalation_id: int
    violation_type: str
    severity: int
    created_at: int
    status: EscalationStatus = EscalationStatus.PENDING
    assigned_to: Optional[str] = None
    resolution_notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["status"] = self.status.value
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Escalation':
        return cls(
            entity=data["entity"],
            escalation_id=int(data["escalation_id"]),
            violation_type=data["violation_type"],
            severity=int(data["severity"]),
            created_at=int(data["created_at"]),
            status=EscalationStatus(data.get("status", "PENDING")),
            assigned_to=data.get("assigned_to"),
            resolution_notes=data.get("resolution_notes"),
        )


# Global counter names
NEXT_REPORT_ID = "next_report_id"
NEXT_AUDIT_ID = "next_audit_id"
NEXT_ESCALATION_ID = "next_escalation_id"
TOTAL_ENTITIES = "total_entities"
ORACLE_COUNT = "oracle_count"

COUNTER_DEFAULTS = {
    NEXT_REPORT_ID: 1,
    NEXT_AUDIT_ID: 1,
    NEXT_ESCALATION_ID: 1,
    TOTAL_ENTITIES: 0,
    ORACLE_COUNT: 0,
}

PAUSED_FLAG = "paused"
