"""
Compliance Oracle Engine

Public entry points of the compliance-monitoring core. Each entry point is
an atomic state transition or a pure read:

    | Operation                               | Caller        |
    |-----------------------------------------|---------------|
    | pause / unpause                         | admin         |
    | add_oracle / deactivate_oracle          | admin         |
    | register_entity                         | admin         |
    | submit_compliance_data                  | active oracle |
    | validate_report                         | admin         |
    | conduct_entity_audit                    | active oracle |
    | generate_compliance_intelligence_report | active oracle |

Every operation checks all of its pre-conditions before its first write
and runs inside one store transaction, so a rejected call leaves no trace
and concurrent callers are serialized. Rejections raise a typed
ComplianceError and are logged as OPERATION_REJECTED events.
"""

from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from .access import AccessPolicy, RegistryAccessPolicy
from .audits import AuditLog
from .clock import LogicalClock, ManualClock
from .entities import EntityRegistry
from .errors import ComplianceError, NotFoundError, UnauthorizedError
from .escalations import EscalationManager
from .ingestion import ReportIngestion
from .intelligence import IntelligenceReport, IntelligenceReportCompiler
from .logging_config import ComplianceEventLogger, event_log
from .oracles import OracleRegistry
from .prediction import EntityForecast, PredictiveRiskEngine
from .records import (
    COUNTER_DEFAULTS,
    PAUSED_FLAG,
    Audit,
    Entity,
    Escalation,
    Oracle,
    Report,
)
from .signing import SigningService
from .store import InMemoryStateStore, StateStore


class ComplianceEngine:
    """
    The compliance-monitoring core.

    Usage:
        engine = ComplianceEngine(admins=["admin"], clock=ManualClock(100))
        engine.add_oracle("admin", "oracle-1", 10)
        engine.register_entity("admin", "acme", "Acme Corp")
        report_id = engine.submit_compliance_data(
            "oracle-1", "acme", digest, [80, 75, 90], "quarterly review", "LOW"
        )
    """

    def __init__(
        self,
        admins: Iterable[str],
        store: Optional[StateStore] = None,
        clock: Optional[LogicalClock] = None,
        access: Optional[AccessPolicy] = None,
        signer: Optional[SigningService] = None,
        events: ComplianceEventLogger = event_log
    ):
        self.store = store or InMemoryStateStore()
        self.clock = clock or ManualClock()
        self.access = access or RegistryAccessPolicy(self.store, admins)
        self.events = events

        self.oracles = OracleRegistry(self.store, events)
        self.entities = EntityRegistry(self.store, events)
        self.escalations = EscalationManager(self.store, events)
        self.ingestion = ReportIngestion(
            self.store, self.oracles, self.entities, self.escalations, events
        )
        self.audits = AuditLog(self.store, self.entities, events)
        self.analytics = PredictiveRiskEngine(self.store)
        self.compiler = IntelligenceReportCompiler(self.analytics, signer)

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    @contextmanager
    def _operation(self, name: str, caller: Optional[str]) -> Iterator[None]:
        try:
            with self.store.transaction():
                yield
        except ComplianceError as e:
            self.events.operation_rejected(name, caller, e.code.value, e.detail)
            raise

    def _require_admin(self, caller: Optional[str]) -> None:
        if not self.access.is_admin(caller):
            raise UnauthorizedError(f"{caller!r} is not an administrator")

    def _require_oracle(self, caller: Optional[str]) -> None:
        if not self.access.is_active_oracle(caller):
            raise UnauthorizedError(f"{caller!r} is not an active oracle")

    def _require_unpaused(self) -> None:
        if self.store.get_flag(PAUSED_FLAG):
            raise UnauthorizedError("system is paused")

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def pause(self, caller: str) -> None:
        with self._operation("pause", caller):
            self._require_admin(caller)
            self.store.set_flag(PAUSED_FLAG, True)
        self.events.paused(True, caller)

    def unpause(self, caller: str) -> None:
        with self._operation("unpause", caller):
            self._require_admin(caller)
            self.store.set_flag(PAUSED_FLAG, False)
        self.events.paused(False, caller)

    def add_oracle(self, caller: str, identity: str, initial_reputation: int) -> Oracle:
        with self._operation("add_oracle", caller):
            self._require_admin(caller)
            return self.oracles.add(identity, initial_reputation, self.clock.now())

    def deactivate_oracle(self, caller: str, identity: str) -> Oracle:
        with self._operation("deactivate_oracle", caller):
            self._require_admin(caller)
            return self.oracles.deactivate(identity, self.clock.now())

    def register_entity(self, caller: str, identity: str, name: str) -> Entity:
        with self._operation("register_entity", caller):
            self._require_admin(caller)
            self._require_unpaused()
            return self.entities.register(identity, name, self.clock.now())

    def validate_report(self, caller: str, entity: str, report_id: int, valid: bool) -> Report:
        with self._operation("validate_report", caller):
            self._require_admin(caller)
            return self.ingestion.validate(entity, report_id, valid)

    # ------------------------------------------------------------------
    # Oracle operations
    # ------------------------------------------------------------------

    def submit_compliance_data(
        self,
        caller: str,
        entity: str,
        evidence_digest: bytes,
        metrics: Sequence[int],
        notes: str = "",
        severity: str = ""
    ) -> int:
        with self._operation("submit_compliance_data", caller):
            self._require_oracle(caller)
            self._require_unpaused()
            return self.ingestion.submit(
                caller, entity, evidence_digest, metrics, notes, severity, self.clock.now()
            )

    def conduct_entity_audit(
        self,
        caller: str,
        entity: str,
        audit_type: str,
        findings: Sequence[int],
        recommendations: str = ""
    ) -> int:
        with self._operation("conduct_entity_audit", caller):
            self._require_oracle(caller)
            return self.audits.record(
                caller, entity, audit_type, findings, recommendations, self.clock.now()
            )

    def generate_compliance_intelligence_report(
        self,
        caller: str,
        entities: Sequence[str],
        prediction_horizon: int,
        framework: str
    ) -> IntelligenceReport:
        with self._operation("generate_compliance_intelligence_report", caller):
            self._require_oracle(caller)
            report = self.compiler.compile(
                entities, prediction_horizon, framework, self.clock.now()
            )
        self.events.intelligence_compiled(
            caller, report.entities, report.confidence_score, report.is_signed()
        )
        return report

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_oracle(self, identity: str) -> Optional[Oracle]:
        return self.oracles.get(identity)

    def is_authorized_oracle(self, identity: str) -> bool:
        return self.oracles.is_authorized(identity)

    def get_entity(self, identity: str) -> Optional[Entity]:
        return self.entities.get(identity)

    def get_report(self, entity: str, report_id: int) -> Optional[Report]:
        return self.store.get_report(entity, report_id)

    def get_audit(self, entity: str, audit_id: int) -> Optional[Audit]:
        return self.audits.get(entity, audit_id)

    def get_escalation(self, entity: str, escalation_id: int) -> Optional[Escalation]:
        return self.escalations.get(entity, escalation_id)

    def list_escalations(self, entity: str) -> List[Escalation]:
        return self.escalations.for_entity(entity)

    def evaluate_entity(self, identity: str) -> EntityForecast:
        entity = self.entities.get(identity)
        if entity is None:
            raise NotFoundError(f"entity {identity} not registered")
        return self.analytics.forecast(entity, self.clock.now())

    def is_paused(self) -> bool:
        return self.store.get_flag(PAUSED_FLAG)

    def counters(self) -> Dict[str, int]:
        with self.store.transaction():
            return {name: self.store.get_counter(name) for name in COUNTER_DEFAULTS}
