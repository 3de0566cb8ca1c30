"""
Intelligence Report Compiler

Composes a cohort risk profile, a risk prediction and a regulatory-pattern
analysis into one report. When a signing service is configured the report
is bound to a hash of its body and signed with Ed25519.

The regulatory-pattern analysis is a placeholder analytic: it returns the
framework name, a constant compliance baseline and static
recommendations.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .bounds import bounded
from .canonicalization import canonicalize
from .config import FRAMEWORK_COMPLIANCE_BASELINE, MAX_COHORT, REGULATORY_RECOMMENDATIONS
from .hashing import report_hash, verify_hash
from .prediction import (
    PredictiveRiskEngine,
    RiskPrediction,
    RiskProfile,
    aggregate_risk_profile,
    overall_confidence,
    predict_risks,
)
from .signing import SigningService, verify_signature

REPORT_VERSION = "1.0"


@dataclass
class RegulatoryPatterns:
    framework: str
    framework_compliance: int = FRAMEWORK_COMPLIANCE_BASELINE
    recommendations: List[str] = field(default_factory=lambda: list(REGULATORY_RECOMMENDATIONS))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "framework": self.framework,
            "framework_compliance": self.framework_compliance,
            "recommendations": list(self.recommendations),
        }


def analyze_regulatory_patterns(framework: str) -> RegulatoryPatterns:
    return RegulatoryPatterns(framework=framework)


@dataclass
class IntelligenceReport:
    """Cohort-level compliance intelligence."""
    generated_at: int
    framework: str
    prediction_horizon: int
    entities: List[str]
    risk_profile: RiskProfile
    risk_prediction: RiskPrediction
    regulatory_patterns: RegulatoryPatterns
    confidence_score: int
    report_hash: Optional[str] = None
    signatures: List[Dict[str, Any]] = field(default_factory=list)

    def body(self) -> Dict[str, Any]:
        """The signed portion of the report."""
        return {
            "report_version": REPORT_VERSION,
            "generated_at": self.generated_at,
            "framework": self.framework,
            "prediction_horizon": self.prediction_horizon,
            "entities": list(self.entities),
            "risk_profile": self.risk_profile.to_dict(),
            "risk_prediction": self.risk_prediction.to_dict(),
            "regulatory_patterns": self.regulatory_patterns.to_dict(),
            "confidence_score": self.confidence_score,
        }

    def to_dict(self) -> Dict[str, Any]:
        d = self.body()
        if self.report_hash:
            d["report_hash"] = self.report_hash
        if self.signatures:
            d["signatures"] = list(self.signatures)
        return d

    def is_signed(self) -> bool:
        return bool(self.signatures)


class IntelligenceReportCompiler:

    def __init__(self, analytics: PredictiveRiskEngine, signer: Optional[SigningService] = None):
        self.analytics = analytics
        self.signer = signer

    def compile(
        self,
        entity_ids: Sequence[str],
        prediction_horizon: int,
        framework: str,
        now: int
    ) -> IntelligenceReport:
        ids = bounded(entity_ids, MAX_COHORT, "entities")
        # Profile and prediction read the same snapshot.
        cohort = self.analytics.snapshot(ids)
        profile = aggregate_risk_profile(cohort)
        prediction = predict_risks(cohort, now)

        report = IntelligenceReport(
            generated_at=now,
            framework=framework,
            prediction_horizon=prediction_horizon,
            entities=[e.identity for e in cohort],
            risk_profile=profile,
            risk_prediction=prediction,
            regulatory_patterns=analyze_regulatory_patterns(framework),
            confidence_score=overall_confidence(profile, prediction),
        )
        if self.signer is not None:
            self.sign(report)
        return report

    def sign(self, report: IntelligenceReport) -> IntelligenceReport:
        body = report.body()
        report.report_hash = report_hash(body)
        report.signatures = [self.signer.sign(canonicalize(body))]
        return report


def verify_intelligence_report(report: Dict[str, Any], trust_store: Dict[str, Any]) -> bool:
    """
    Check a serialized report against a trust store.

    The report hash must match the recomputed body hash and at least one
    signature must verify under a key the trust store lists.
    """
    body = {k: v for k, v in report.items() if k not in ("report_hash", "signatures")}
    declared = report.get("report_hash")
    if not declared or not verify_hash(declared, body):
        return False

    keys = {k["key_id"]: k["public_key"] for k in trust_store.get("keys", [])}
    payload = canonicalize(body)
    for sig in report.get("signatures", []):
        public_key = keys.get(sig.get("key_id"))
        if public_key and verify_signature(payload, sig.get("sig", ""), public_key):
            return True
    return False
