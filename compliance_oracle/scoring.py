"""
Compliance scoring rules.

Pure derivations from submitted metrics to score, status and risk
category. Thresholds are inclusive at the lower bound of each band.
"""

from typing import Sequence

from .config import COMPLIANT_THRESHOLD, CRITICAL_THRESHOLD, MEDIUM_RISK_VIOLATIONS
from .errors import InvalidDataError
from .records import ComplianceStatus, RiskCategory


def compliance_score(metrics: Sequence[int]) -> int:
    """Truncating integer mean of the metrics."""
    if not metrics:
        raise InvalidDataError("metrics cannot be empty")
    return sum(metrics) // len(metrics)


def derive_status(score: int) -> ComplianceStatus:
    if score >= COMPLIANT_THRESHOLD:
        return ComplianceStatus.COMPLIANT
    if score >= CRITICAL_THRESHOLD:
        return ComplianceStatus.NON_COMPLIANT
    return ComplianceStatus.CRITICAL


def derive_risk_category(score: int, violations: int) -> RiskCategory:
    """
    HIGH below the critical threshold, MEDIUM for a non-compliant score with
    a history of violations, LOW otherwise.

    A compliant score is LOW no matter how many violations are on record.
    """
    if score < CRITICAL_THRESHOLD:
        return RiskCategory.HIGH
    if score < COMPLIANT_THRESHOLD and violations > MEDIUM_RISK_VIOLATIONS:
        return RiskCategory.MEDIUM
    return RiskCategory.LOW


def counts_as_violation(status: ComplianceStatus) -> bool:
    return status in (ComplianceStatus.NON_COMPLIANT, ComplianceStatus.CRITICAL)
