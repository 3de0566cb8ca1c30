import logging
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.responses import JSONResponse

from compliance_oracle import (
    ComplianceEngine,
    ComplianceError,
    ErrorCode,
    InMemoryStateStore,
    ManualClock,
    SigningService,
    SqliteStateStore,
)
from compliance_oracle.logging_config import configure_logging, set_request_id

from . import config
from .models import (
    AddOracleRequest,
    AuditRequest,
    IntelligenceRequest,
    RegisterEntityRequest,
    SubmitReportRequest,
    ValidateReportRequest,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Compliance Oracle")

STATUS_BY_CODE = {
    ErrorCode.UNAUTHORIZED: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.ALREADY_EXISTS: 409,
    ErrorCode.CAPACITY_EXCEEDED: 409,
    ErrorCode.ARITHMETIC_RANGE: 409,
    ErrorCode.ESCALATION_PENDING: 409,
    ErrorCode.INVALID_DATA: 400,
    ErrorCode.INVALID_ORACLE: 400,
    ErrorCode.INVALID_TIMEFRAME: 400,
    ErrorCode.INSUFFICIENT_BALANCE: 402,
}

ENGINE: Optional[ComplianceEngine] = None
CLOCK: Optional[ManualClock] = None
SIGNER: Optional[SigningService] = None


def get_store():
    if config.STORE_BACKEND == "sqlite":
        return SqliteStateStore(config.DB_PATH)
    return InMemoryStateStore()


def get_signer() -> Optional[SigningService]:
    if not config.SIGN_REPORTS:
        return None
    signer = SigningService()
    if config.SIGNING_KEY_SEED:
        signer.import_key_pair(config.SIGNING_KEY_ID, bytes.fromhex(config.SIGNING_KEY_SEED))
    else:
        signer.generate_key_pair(config.SIGNING_KEY_ID)
    return signer


@app.on_event("startup")
def _startup():
    global ENGINE, CLOCK, SIGNER
    level = "DEBUG" if config.is_debug() else config.LOG_LEVEL
    configure_logging(level=level, json_format=config.LOG_JSON)
    failed = [name for name, ok in config.validate_config().items() if not ok]
    if failed:
        raise RuntimeError(f"invalid configuration: {', '.join(failed)}")
    CLOCK = ManualClock(config.START_HEIGHT)
    SIGNER = get_signer()
    ENGINE = ComplianceEngine(
        admins=config.ADMIN_IDS, store=get_store(), clock=CLOCK, signer=SIGNER
    )
    logger.info("compliance engine started (store=%s, env=%s)", config.STORE_BACKEND, config.ENV)


@app.exception_handler(ComplianceError)
async def _compliance_error(request, exc: ComplianceError):
    return JSONResponse(status_code=STATUS_BY_CODE.get(exc.code, 400), content=exc.to_dict())


async def call_context(
    x_caller_id: Optional[str] = Header(default=None),
    x_block_height: Optional[int] = Header(default=None),
    x_request_id: Optional[str] = Header(default=None),
) -> Optional[str]:
    """Bind the request id, advance the clock, and return the caller identity."""
    set_request_id(x_request_id)
    if x_block_height is not None:
        try:
            CLOCK.advance_to(x_block_height)
        except ValueError:
            raise HTTPException(400, "BLOCK_HEIGHT_REGRESSION")
    return x_caller_id


def _found(record):
    if record is None:
        raise HTTPException(404, "NOT_FOUND")
    return record.to_dict()


@app.get("/health")
def health():
    return {
        "status": "ok",
        "env": config.ENV,
        "store": config.STORE_BACKEND,
        "height": CLOCK.now(),
        "paused": ENGINE.is_paused(),
        "counters": ENGINE.counters(),
    }


# ============================================================
# Administration
# ============================================================

@app.post("/admin/pause")
def pause(caller: Optional[str] = Depends(call_context)):
    ENGINE.pause(caller)
    return {"paused": True}


@app.post("/admin/unpause")
def unpause(caller: Optional[str] = Depends(call_context)):
    ENGINE.unpause(caller)
    return {"paused": False}


@app.post("/oracles")
def add_oracle(req: AddOracleRequest, caller: Optional[str] = Depends(call_context)):
    return ENGINE.add_oracle(caller, req.identity, req.initial_reputation).to_dict()


@app.delete("/oracles/{identity}")
def deactivate_oracle(identity: str, caller: Optional[str] = Depends(call_context)):
    return ENGINE.deactivate_oracle(caller, identity).to_dict()


@app.get("/oracles/{identity}")
def get_oracle(identity: str):
    return _found(ENGINE.get_oracle(identity))


@app.post("/entities")
def register_entity(req: RegisterEntityRequest, caller: Optional[str] = Depends(call_context)):
    return ENGINE.register_entity(caller, req.identity, req.name).to_dict()


@app.get("/entities/{identity}")
def get_entity(identity: str):
    return _found(ENGINE.get_entity(identity))


# ============================================================
# Attestations and audits
# ============================================================

@app.post("/entities/{identity}/reports")
def submit_report(identity: str, req: SubmitReportRequest,
                  caller: Optional[str] = Depends(call_context)):
    report_id = ENGINE.submit_compliance_data(
        caller, identity, bytes.fromhex(req.evidence_digest), req.metrics,
        req.notes, req.severity
    )
    return {"report_id": report_id, "entity": ENGINE.get_entity(identity).to_dict()}


@app.get("/entities/{identity}/reports/{report_id}")
def get_report(identity: str, report_id: int):
    return _found(ENGINE.get_report(identity, report_id))


@app.post("/entities/{identity}/reports/{report_id}/validation")
def validate_report(identity: str, report_id: int, req: ValidateReportRequest,
                    caller: Optional[str] = Depends(call_context)):
    return ENGINE.validate_report(caller, identity, report_id, req.valid).to_dict()


@app.post("/entities/{identity}/audits")
def conduct_audit(identity: str, req: AuditRequest,
                  caller: Optional[str] = Depends(call_context)):
    audit_id = ENGINE.conduct_entity_audit(
        caller, identity, req.audit_type, req.findings, req.recommendations
    )
    return {"audit_id": audit_id, "audit": ENGINE.get_audit(identity, audit_id).to_dict()}


@app.get("/entities/{identity}/audits/{audit_id}")
def get_audit(identity: str, audit_id: int):
    return _found(ENGINE.get_audit(identity, audit_id))


@app.get("/entities/{identity}/escalations")
def list_escalations(identity: str):
    return [e.to_dict() for e in ENGINE.list_escalations(identity)]


@app.get("/entities/{identity}/forecast")
def forecast(identity: str):
    return ENGINE.evaluate_entity(identity).to_dict()


# ============================================================
# Intelligence
# ============================================================

@app.post("/intelligence")
def intelligence(req: IntelligenceRequest, caller: Optional[str] = Depends(call_context)):
    report = ENGINE.generate_compliance_intelligence_report(
        caller, req.entities, req.prediction_horizon, req.framework
    )
    return report.to_dict()


@app.get("/trust_store")
def trust_store():
    if SIGNER is None:
        raise HTTPException(404, "SIGNING_DISABLED")
    return SIGNER.get_trust_store()
