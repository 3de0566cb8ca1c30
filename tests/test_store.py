"""
State store tests.

The same behavioral checks run against the in-memory and SQLite
backends.
"""

import os
import shutil
import tempfile
import unittest

from compliance_oracle import (
    ArithmeticRangeError,
    Audit,
    ComplianceEngine,
    Entity,
    Escalation,
    InMemoryStateStore,
    ManualClock,
    Oracle,
    Report,
    SqliteStateStore,
    UnauthorizedError,
    evidence_digest,
)
from compliance_oracle.records import NEXT_REPORT_ID, PAUSED_FLAG, TOTAL_ENTITIES


class StoreContract:
    """Mixin with checks every StateStore must pass."""

    def make_store(self):
        raise NotImplementedError

    def setUp(self):
        self.store = self.make_store()

    def test_counter_defaults(self):
        self.assertEqual(self.store.get_counter(NEXT_REPORT_ID), 1)
        self.assertEqual(self.store.get_counter(TOTAL_ENTITIES), 0)

    def test_allocate(self):
        self.assertEqual(self.store.allocate(NEXT_REPORT_ID), 1)
        self.assertEqual(self.store.allocate(NEXT_REPORT_ID), 2)
        self.assertEqual(self.store.get_counter(NEXT_REPORT_ID), 3)

    def test_counter_cannot_go_negative(self):
        with self.assertRaises(ArithmeticRangeError):
            self.store.adjust_counter(TOTAL_ENTITIES, -1)
        self.assertEqual(self.store.get_counter(TOTAL_ENTITIES), 0)

    def test_records_round_trip(self):
        oracle = Oracle("o1", True, 10, 2, 50)
        entity = Entity("acme", "Acme Corp", compliance_score=81, last_updated=50)
        report = Report("acme", 1, "o1", 50, evidence_digest("x"), [80, 82], "n", "LOW")
        audit = Audit("acme", 1, "o1", "KYC", [3, 4], "", False, 50)
        escalation = Escalation("acme", 1, "CRITICAL_COMPLIANCE_FAILURE", 10, 50)

        self.store.put_oracle(oracle)
        self.store.put_entity(entity)
        self.store.put_report(report)
        self.store.put_audit(audit)
        self.store.put_escalation(escalation)

        self.assertEqual(self.store.get_oracle("o1"), oracle)
        self.assertEqual(self.store.get_entity("acme"), entity)
        self.assertEqual(self.store.get_report("acme", 1), report)
        self.assertEqual(self.store.get_audit("acme", 1), audit)
        self.assertEqual(self.store.get_escalation("acme", 1), escalation)

    def test_returned_records_are_copies(self):
        self.store.put_entity(Entity("acme", "Acme Corp"))
        entity = self.store.get_entity("acme")
        entity.violations = 9
        self.assertEqual(self.store.get_entity("acme").violations, 0)

    def test_list_escalations_ordered_by_id(self):
        for escalation_id in (3, 1, 2):
            self.store.put_escalation(Escalation("acme", escalation_id, "T", 10, 0))
        self.store.put_escalation(Escalation("globex", 4, "T", 10, 0))
        ids = [e.escalation_id for e in self.store.list_escalations("acme")]
        self.assertEqual(ids, [1, 2, 3])

    def test_flags(self):
        self.assertFalse(self.store.get_flag(PAUSED_FLAG))
        self.store.set_flag(PAUSED_FLAG, True)
        self.assertTrue(self.store.get_flag(PAUSED_FLAG))

    def test_transaction_rolls_back(self):
        with self.assertRaises(RuntimeError):
            with self.store.transaction():
                self.store.put_entity(Entity("acme", "Acme Corp"))
                self.store.allocate(NEXT_REPORT_ID)
                raise RuntimeError("abort")
        self.assertIsNone(self.store.get_entity("acme"))
        self.assertEqual(self.store.get_counter(NEXT_REPORT_ID), 1)

    def test_rollback_after_long_history(self):
        for i in range(200):
            self.store.put_entity(Entity(f"e{i}", f"Entity {i}"))
            self.store.allocate(NEXT_REPORT_ID)
        self.store.set_flag(PAUSED_FLAG, False)

        with self.assertRaises(RuntimeError):
            with self.store.transaction():
                self.store.put_entity(Entity("e7", "Renamed", compliance_score=40))
                self.store.put_entity(Entity("newcomer", "Newcomer"))
                self.store.allocate(NEXT_REPORT_ID)
                with self.store.transaction():
                    self.store.adjust_counter(TOTAL_ENTITIES, 5)
                self.store.set_flag(PAUSED_FLAG, True)
                self.store.set_flag("maintenance", True)
                raise RuntimeError("abort")

        self.assertEqual(self.store.get_entity("e7").name, "Entity 7")
        self.assertEqual(self.store.get_entity("e7").compliance_score, 0)
        self.assertIsNone(self.store.get_entity("newcomer"))
        self.assertEqual(self.store.get_entity("e199").name, "Entity 199")
        self.assertEqual(self.store.get_counter(NEXT_REPORT_ID), 201)
        self.assertEqual(self.store.get_counter(TOTAL_ENTITIES), 0)
        self.assertFalse(self.store.get_flag(PAUSED_FLAG))
        self.assertFalse(self.store.get_flag("maintenance"))

        # a later transaction starts from a clean slate
        with self.store.transaction():
            self.store.put_entity(Entity("newcomer", "Newcomer"))
        self.assertIsNotNone(self.store.get_entity("newcomer"))

    def test_rejected_submission_after_many_reports(self):
        engine = ComplianceEngine(admins=["admin"], store=self.store, clock=ManualClock(10))
        engine.add_oracle("admin", "o1", 10)
        engine.register_entity("admin", "acme", "Acme Corp")
        for i in range(150):
            engine.submit_compliance_data("o1", "acme", evidence_digest(f"r{i}"), [95])
        before = (engine.get_entity("acme"), engine.get_oracle("o1"), engine.counters())

        with self.assertRaises(UnauthorizedError):
            engine.submit_compliance_data("intruder", "acme", evidence_digest("x"), [10])

        after = (engine.get_entity("acme"), engine.get_oracle("o1"), engine.counters())
        self.assertEqual(after, before)
        self.assertEqual(engine.counters()["next_report_id"], 151)
        self.assertIsNone(engine.get_report("acme", 151))

    def test_nested_transaction_commits_with_outer(self):
        with self.store.transaction():
            with self.store.transaction():
                self.store.put_entity(Entity("acme", "Acme Corp"))
            self.store.adjust_counter(TOTAL_ENTITIES, 1)
        self.assertIsNotNone(self.store.get_entity("acme"))
        self.assertEqual(self.store.get_counter(TOTAL_ENTITIES), 1)

    def test_snapshot_entities(self):
        self.store.put_entity(Entity("acme", "Acme Corp"))
        found = self.store.snapshot_entities(["acme", "ghost"])
        self.assertEqual(list(found), ["acme"])

    def test_reset(self):
        self.store.put_entity(Entity("acme", "Acme Corp"))
        self.store.allocate(NEXT_REPORT_ID)
        self.store.reset()
        self.assertIsNone(self.store.get_entity("acme"))
        self.assertEqual(self.store.get_counter(NEXT_REPORT_ID), 1)

    def test_engine_scenario(self):
        engine = ComplianceEngine(admins=["admin"], store=self.store, clock=ManualClock(10))
        engine.add_oracle("admin", "o1", 10)
        engine.register_entity("admin", "acme", "Acme Corp")
        engine.submit_compliance_data("o1", "acme", evidence_digest("a"), [20, 30])
        engine.submit_compliance_data("o1", "acme", evidence_digest("b"), [90])
        engine.pause("admin")
        with self.assertRaises(UnauthorizedError):
            engine.submit_compliance_data("o1", "acme", evidence_digest("c"), [90])

        entity = engine.get_entity("acme")
        self.assertEqual(entity.compliance_score, 90)
        self.assertEqual(entity.violations, 1)
        self.assertEqual(len(engine.list_escalations("acme")), 1)
        self.assertEqual(engine.get_oracle("o1").reputation_score, 20)
        self.assertEqual(engine.counters()["next_report_id"], 3)


class TestInMemoryStateStore(StoreContract, unittest.TestCase):

    def make_store(self):
        return InMemoryStateStore()


class TestSqliteStateStore(StoreContract, unittest.TestCase):

    def make_store(self):
        return SqliteStateStore(":memory:")

    def tearDown(self):
        self.store.close()


class TestSqlitePersistence(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmpdir, "state", "compliance.db")

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_state_survives_reopen(self):
        store = SqliteStateStore(self.path)
        engine = ComplianceEngine(admins=["admin"], store=store, clock=ManualClock(10))
        engine.add_oracle("admin", "o1", 10)
        engine.register_entity("admin", "acme", "Acme Corp")
        engine.submit_compliance_data("o1", "acme", evidence_digest("a"), [50])
        store.close()

        reopened = SqliteStateStore(self.path)
        try:
            engine = ComplianceEngine(admins=["admin"], store=reopened, clock=ManualClock(20))
            self.assertEqual(engine.get_entity("acme").compliance_score, 50)
            self.assertEqual(engine.counters()["next_report_id"], 2)
            self.assertEqual(engine.counters()["total_entities"], 1)
            self.assertEqual(engine.get_report("acme", 1).evidence_digest, evidence_digest("a"))
        finally:
            reopened.close()


if __name__ == "__main__":
    unittest.main()
