"""
Compliance Oracle build-time configuration.

All thresholds, caps and model weights are fixed constants. Deployment
settings (storage path, admin identity, logging) belong to the service
configuration, not here.
"""

# ============================================================
# Status and Risk Thresholds
# ============================================================

COMPLIANT_THRESHOLD = 70   # score >= 70 -> COMPLIANT
CRITICAL_THRESHOLD = 40    # score < 40 -> CRITICAL
MEDIUM_RISK_VIOLATIONS = 3  # violations > 3 (and score < 70) -> MEDIUM

SCORE_MIN = 0
SCORE_MAX = 100


# ============================================================
# Oracle Registry
# ============================================================

MAX_ORACLES = 10
REPUTATION_REWARD = 5
REPUTATION_PENALTY = 2


# ============================================================
# Logical Clock Intervals (block heights)
# ============================================================

AUDIT_INTERVAL = 1440

# Reserved for the escalation-resolution workflow. Not read by any operation.
ESCALATION_DELAY = 144
AUDIT_RETENTION = 4320


# ============================================================
# Escalations
# ============================================================

CRITICAL_FAILURE_TYPE = "CRITICAL_COMPLIANCE_FAILURE"
CRITICAL_FAILURE_SEVERITY = 10


# ============================================================
# Sequence Caps
# ============================================================

MAX_METRICS = 5
MAX_FINDINGS = 10
MAX_COHORT = 50
MAX_AT_RISK = 20
MAX_RECOMMENDATIONS = 10

EVIDENCE_DIGEST_BYTES = 32
FOLLOW_UP_FINDINGS_THRESHOLD = 50


# ============================================================
# Predictive Risk Model
# ============================================================

VIOLATION_WEIGHT = 15
ESCALATION_WEIGHT = 10
STALENESS_WINDOW = 720
STALENESS_PENALTY = 20

AT_RISK_THRESHOLD = 75
PREDICTED_VIOLATION_THRESHOLD = 80
AT_RISK_RECOMMENDATION = "IMMEDIATE_AUDIT_REQUIRED"

FRESHNESS_WINDOW = 144
FRESH_CONFIDENCE = 90
STALE_CONFIDENCE = 60
CONSISTENCY_VIOLATIONS = 3
CONSISTENT_CONFIDENCE = 80
INCONSISTENT_CONFIDENCE = 50

TREND_MARGIN = 10

DATA_QUALITY_MIN_ENTITIES = 5
HIGH_DATA_QUALITY = 80
LOW_DATA_QUALITY = 60


# ============================================================
# Regulatory Pattern Analysis (placeholder analytic)
# ============================================================

FRAMEWORK_COMPLIANCE_BASELINE = 85
REGULATORY_RECOMMENDATIONS = ("ENHANCE_MONITORING", "UPDATE_POLICIES")
