"""
Compliance Oracle

A compliance-monitoring engine. Authorized oracles submit attestations
about tracked entities; the engine derives each entity's compliance
status and risk category, keeps audit and escalation histories, feeds
report validation back into oracle reputation, and forecasts cohort risk.

Usage:
    from compliance_oracle import ComplianceEngine, ManualClock, evidence_digest

    clock = ManualClock(1000)
    engine = ComplianceEngine(admins=["admin"], clock=clock)

    engine.add_oracle("admin", "oracle-1", 10)
    engine.register_entity("admin", "acme", "Acme Corp")

    report_id = engine.submit_compliance_data(
        "oracle-1", "acme", evidence_digest(b"q3 filing"), [35, 30, 40],
        notes="missed filing deadline", severity="HIGH"
    )
    entity = engine.get_entity("acme")       # CRITICAL / HIGH
    escalations = engine.list_escalations("acme")

    report = engine.generate_compliance_intelligence_report(
        "oracle-1", ["acme"], prediction_horizon=1440, framework="SOX"
    )
"""

__version__ = "1.0.0"

# Data model
from .records import (
    Oracle,
    Entity,
    Report,
    Audit,
    Escalation,
    ComplianceStatus,
    RiskCategory,
    EscalationStatus,
    Trend,
)

# Errors
from .errors import (
    ErrorCode,
    ComplianceError,
    UnauthorizedError,
    InvalidOracleError,
    InvalidDataError,
    NotFoundError,
    AlreadyExistsError,
    CapacityExceededError,
    ArithmeticRangeError,
    InsufficientBalanceError,
    InvalidTimeframeError,
    EscalationPendingError,
)

# Infrastructure
from .clock import LogicalClock, ManualClock
from .store import StateStore, InMemoryStateStore, SqliteStateStore
from .access import AccessPolicy, RegistryAccessPolicy

# Scoring and analytics
from .scoring import compliance_score, derive_status, derive_risk_category
from .oracles import adjusted_reputation
from .audits import follow_up_required
from .prediction import (
    EntityForecast,
    RiskProfile,
    RiskPrediction,
    PredictiveRiskEngine,
    predictive_risk_score,
    prediction_confidence,
    aggregate_risk_profile,
    predict_risks,
    overall_confidence,
)

# Reports and signing
from .hashing import evidence_digest, report_hash
from .intelligence import (
    IntelligenceReport,
    IntelligenceReportCompiler,
    RegulatoryPatterns,
    verify_intelligence_report,
)
from .signing import SigningService, KeyPair, verify_signature

# Engine
from .engine import ComplianceEngine


__all__ = [
    "__version__",

    # Data model
    "Oracle",
    "Entity",
    "Report",
    "Audit",
    "Escalation",
    "ComplianceStatus",
    "RiskCategory",
    "EscalationStatus",
    "Trend",

    # Errors
    "ErrorCode",
    "ComplianceError",
    "UnauthorizedError",
    "InvalidOracleError",
    "InvalidDataError",
    "NotFoundError",
    "AlreadyExistsError",
    "CapacityExceededError",
    "ArithmeticRangeError",
    "InsufficientBalanceError",
    "InvalidTimeframeError",
    "EscalationPendingError",

    # Infrastructure
    "LogicalClock",
    "ManualClock",
    "StateStore",
    "InMemoryStateStore",
    "SqliteStateStore",
    "AccessPolicy",
    "RegistryAccessPolicy",

    # Scoring and analytics
    "compliance_score",
    "derive_status",
    "derive_risk_category",
    "adjusted_reputation",
    "follow_up_required",
    "EntityForecast",
    "RiskProfile",
    "RiskPrediction",
    "PredictiveRiskEngine",
    "predictive_risk_score",
    "prediction_confidence",
    "aggregate_risk_profile",
    "predict_risks",
    "overall_confidence",

    # Reports and signing
    "evidence_digest",
    "report_hash",
    "IntelligenceReport",
    "IntelligenceReportCompiler",
    "RegulatoryPatterns",
    "verify_intelligence_report",
    "SigningService",
    "KeyPair",
    "verify_signature",

    # Engine
    "ComplianceEngine",
]
