#!/usr/bin/env python3
"""
Compliance Oracle Command Line Interface

Usage:
    compliance-oracle demo
    compliance-oracle replay --scenario <file> [--db <file>] [--output <file>]
    compliance-oracle keygen [--key-id <id>] [--output <file>]
    compliance-oracle verify --report <file> --trust-store <file>

Scenario files hold the administrator set and an ordered list of steps:

    {
      "admins": ["admin"],
      "start_height": 100,
      "steps": [
        {"op": "add_oracle", "caller": "admin", "identity": "oracle-1", "reputation": 10},
        {"op": "register_entity", "caller": "admin", "identity": "acme", "name": "Acme"},
        {"op": "submit", "caller": "oracle-1", "at": 150, "entity": "acme",
         "evidence": "q3 filing", "metrics": [80, 70]}
      ]
    }
"""

import argparse
import json
import sys
from datetime import datetime
from typing import Any, Callable, Dict


def load_json(path: str) -> dict:
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def save_json(data: dict, path: str):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)


def _digest(step: Dict[str, Any]) -> bytes:
    from compliance_oracle import evidence_digest

    if "evidence_digest" in step:
        return bytes.fromhex(step["evidence_digest"])
    return evidence_digest(step.get("evidence", ""))


def _step_handlers(engine) -> Dict[str, Callable[[Dict[str, Any]], Any]]:
    return {
        "pause": lambda s: engine.pause(s["caller"]),
        "unpause": lambda s: engine.unpause(s["caller"]),
        "add_oracle": lambda s: engine.add_oracle(
            s["caller"], s["identity"], s.get("reputation", 0)).to_dict(),
        "deactivate_oracle": lambda s: engine.deactivate_oracle(
            s["caller"], s["identity"]).to_dict(),
        "register_entity": lambda s: engine.register_entity(
            s["caller"], s["identity"], s.get("name", "")).to_dict(),
        "submit": lambda s: {"report_id": engine.submit_compliance_data(
            s["caller"], s["entity"], _digest(s), s.get("metrics", []),
            s.get("notes", ""), s.get("severity", ""))},
        "validate_report": lambda s: engine.validate_report(
            s["caller"], s["entity"], s["report_id"], s.get("valid", True)).to_dict(),
        "audit": lambda s: {"audit_id": engine.conduct_entity_audit(
            s["caller"], s["entity"], s.get("audit_type", ""), s.get("findings", []),
            s.get("recommendations", ""))},
        "intelligence": lambda s: engine.generate_compliance_intelligence_report(
            s["caller"], s.get("entities", []), s.get("prediction_horizon", 0),
            s.get("framework", "")).to_dict(),
        "entity": lambda s: _optional_dict(engine.get_entity(s["identity"])),
        "escalations": lambda s: [e.to_dict() for e in engine.list_escalations(s["entity"])],
    }


def _optional_dict(record):
    return record.to_dict() if record is not None else None


def cmd_replay(args):
    """Apply a scenario file step by step."""
    from compliance_oracle import (
        ComplianceEngine,
        ComplianceError,
        ManualClock,
        SqliteStateStore,
    )

    scenario = load_json(args.scenario)
    clock = ManualClock(scenario.get("start_height", 0))
    store = SqliteStateStore(args.db) if args.db else None
    engine = ComplianceEngine(admins=scenario.get("admins", []), store=store, clock=clock)
    handlers = _step_handlers(engine)

    results = []
    failures = 0
    for index, step in enumerate(scenario.get("steps", [])):
        op = step.get("op")
        if "at" in step:
            try:
                clock.advance_to(step["at"])
            except ValueError:
                results.append({"step": index, "op": op, "error": "BLOCK_HEIGHT_REGRESSION"})
                failures += 1
                continue
        handler = handlers.get(op)
        if handler is None:
            results.append({"step": index, "op": op, "error": "UNKNOWN_OP"})
            failures += 1
            continue
        try:
            outcome = handler(step)
            results.append({"step": index, "op": op, "height": clock.now(), "result": outcome})
        except ComplianceError as e:
            failures += 1
            results.append({"step": index, "op": op, "height": clock.now(), **e.to_dict()})

    output = {"results": results, "counters": engine.counters()}
    if args.output:
        save_json(output, args.output)
        print(f"Results saved to: {args.output}")
    else:
        print(json.dumps(output, indent=2))

    if failures:
        print(f"\n✗ {failures} step(s) rejected", file=sys.stderr)
        return 1
    print(f"\n✓ {len(results)} step(s) applied", file=sys.stderr)
    return 0


def cmd_keygen(args):
    """Generate an Ed25519 report-signing key and emit its trust store."""
    from compliance_oracle import SigningService

    service = SigningService()
    key_id = args.key_id or f"kid:compliance-{datetime.now().strftime('%Y%m%d')}-001"
    key_pair = service.generate_key_pair(key_id=key_id, validity_days=args.validity_days or 90)

    trust_store = service.get_trust_store()
    if args.output:
        save_json(trust_store, args.output)
        print(f"Trust store saved to: {args.output}")
    else:
        print(json.dumps(trust_store, indent=2))

    if args.seed_output:
        with open(args.seed_output, 'w', encoding='utf-8') as f:
            f.write(key_pair.signing_key.hex())
        print(f"Signing seed saved to: {args.seed_output}", file=sys.stderr)

    print(f"\nGenerated key: {key_id}", file=sys.stderr)
    print(f"Valid until: {key_pair.valid_until.isoformat()}", file=sys.stderr)


def cmd_verify(args):
    """Verify a signed intelligence report."""
    from compliance_oracle import verify_intelligence_report

    report = load_json(args.report)
    trust_store = load_json(args.trust_store)

    if verify_intelligence_report(report, trust_store):
        print("✓ VALID")
        return 0
    print("✗ INVALID: hash or signature mismatch")
    return 1


def cmd_demo(args):
    """Run a demonstration scenario against an in-memory engine."""
    from compliance_oracle import (
        ComplianceEngine,
        ComplianceError,
        ManualClock,
        SigningService,
        evidence_digest,
    )

    print("=" * 60)
    print("Compliance Oracle Demonstration")
    print("=" * 60)

    clock = ManualClock(1000)
    signer = SigningService()
    signer.generate_key_pair("kid:compliance-demo-001")
    engine = ComplianceEngine(admins=["admin"], clock=clock, signer=signer)

    engine.add_oracle("admin", "oracle-alpha", 10)
    engine.add_oracle("admin", "oracle-beta", 10)
    for identity, name in (("acme", "Acme Corp"), ("globex", "Globex"), ("initech", "Initech")):
        engine.register_entity("admin", identity, name)
    print("\nRegistered oracles: oracle-alpha, oracle-beta")
    print("Registered entities: acme, globex, initech")

    print("\n" + "-" * 60)
    print("Attestations")
    print("-" * 60)
    submissions = [
        ("oracle-alpha", "acme", [90, 85, 80], "clean quarter"),
        ("oracle-beta", "globex", [60, 55], "late disclosures"),
        ("oracle-alpha", "initech", [30, 20, 25], "controls failed"),
        ("oracle-beta", "initech", [35, 10], "repeat failure"),
    ]
    for oracle, entity, metrics, notes in submissions:
        clock.advance(10)
        report_id = engine.submit_compliance_data(
            oracle, entity, evidence_digest(notes), metrics, notes, "INFO"
        )
        state = engine.get_entity(entity)
        print(f"  #{report_id} {entity}: score={state.compliance_score} "
              f"status={state.status.value} risk={state.risk_category.value}")

    engine.validate_report("admin", "initech", 4, False)
    print(f"\nReport #4 rejected; oracle-beta reputation: "
          f"{engine.get_oracle('oracle-beta').reputation_score}")

    print("\n" + "-" * 60)
    print("Escalations for initech")
    print("-" * 60)
    for escalation in engine.list_escalations("initech"):
        print(f"  #{escalation.escalation_id} {escalation.violation_type} "
              f"severity={escalation.severity} status={escalation.status.value}")

    print("\n" + "-" * 60)
    print("Rejected operation")
    print("-" * 60)
    try:
        engine.submit_compliance_data("intruder", "acme", evidence_digest("x"), [100])
    except ComplianceError as e:
        print(f"  {e.code.value}: {e.detail}")

    clock.advance(800)
    report = engine.generate_compliance_intelligence_report(
        "oracle-alpha", ["acme", "globex", "initech"], 1440, "SOX"
    )
    print("\n" + "-" * 60)
    print("Intelligence report")
    print("-" * 60)
    print(json.dumps(report.to_dict(), indent=2))

    print("\n" + "=" * 60)
    print("Demonstration complete.")
    print("=" * 60)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="compliance-oracle",
        description="Compliance Oracle CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  compliance-oracle demo
  compliance-oracle replay -s scenario.json --db data/compliance.db
  compliance-oracle keygen -o trust_store.json
  compliance-oracle verify -r report.json -t trust_store.json
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    replay_parser = subparsers.add_parser("replay", help="Apply a scenario file")
    replay_parser.add_argument("-s", "--scenario", required=True, help="Scenario JSON file")
    replay_parser.add_argument("-d", "--db", help="SQLite database path (default: in-memory)")
    replay_parser.add_argument("-o", "--output", help="Output file for results")

    keygen_parser = subparsers.add_parser("keygen", help="Generate report-signing key")
    keygen_parser.add_argument("-o", "--output", help="Output file for trust store")
    keygen_parser.add_argument("-k", "--key-id", help="Key identifier")
    keygen_parser.add_argument("-v", "--validity-days", type=int, help="Validity in days")
    keygen_parser.add_argument("--seed-output", help="Write the hex signing seed to this file")

    verify_parser = subparsers.add_parser("verify", help="Verify a signed intelligence report")
    verify_parser.add_argument("-r", "--report", required=True, help="Report JSON file")
    verify_parser.add_argument("-t", "--trust-store", required=True, help="Trust store JSON file")

    subparsers.add_parser("demo", help="Run demonstration")

    args = parser.parse_args(argv)

    if args.command == "replay":
        return cmd_replay(args)
    elif args.command == "keygen":
        cmd_keygen(args)
        return 0
    elif args.command == "verify":
        return cmd_verify(args)
    elif args.command == "demo":
        return cmd_demo(args)
    else:
        parser.print_help()
        return 2


if __name__ == "__main__":
    sys.exit(main())
