"""
Oracle registry and reputation tests.
"""

import unittest

from compliance_oracle import (
    AlreadyExistsError,
    ArithmeticRangeError,
    CapacityExceededError,
    ComplianceEngine,
    InvalidDataError,
    InvalidOracleError,
    ManualClock,
    UnauthorizedError,
    adjusted_reputation,
    evidence_digest,
)
from compliance_oracle.config import MAX_ORACLES


class TestReputationArithmetic(unittest.TestCase):

    def test_positive_then_negative(self):
        self.assertEqual(adjusted_reputation(adjusted_reputation(10, True), False), 13)

    def test_negative_then_positive(self):
        self.assertEqual(adjusted_reputation(adjusted_reputation(10, False), True), 13)

    def test_penalty_to_zero(self):
        self.assertEqual(adjusted_reputation(2, False), 0)

    def test_underflow_raises(self):
        with self.assertRaises(ArithmeticRangeError):
            adjusted_reputation(1, False)


class TestOracleRegistry(unittest.TestCase):

    def setUp(self):
        self.clock = ManualClock(100)
        self.engine = ComplianceEngine(admins=["admin"], clock=self.clock)

    def test_add_oracle(self):
        oracle = self.engine.add_oracle("admin", "oracle-1", 10)
        self.assertTrue(oracle.active)
        self.assertEqual(oracle.reputation_score, 10)
        self.assertEqual(oracle.total_reports, 0)
        self.assertEqual(oracle.last_activity, 100)
        self.assertTrue(self.engine.is_authorized_oracle("oracle-1"))
        self.assertEqual(self.engine.counters()["oracle_count"], 1)

    def test_add_requires_admin(self):
        with self.assertRaises(UnauthorizedError):
            self.engine.add_oracle("oracle-1", "oracle-2", 10)
        self.assertIsNone(self.engine.get_oracle("oracle-2"))

    def test_negative_reputation_rejected(self):
        with self.assertRaises(InvalidDataError):
            self.engine.add_oracle("admin", "oracle-1", -1)

    def test_duplicate_rejected(self):
        self.engine.add_oracle("admin", "oracle-1", 10)
        with self.assertRaises(AlreadyExistsError):
            self.engine.add_oracle("admin", "oracle-1", 20)
        self.assertEqual(self.engine.get_oracle("oracle-1").reputation_score, 10)
        self.assertEqual(self.engine.counters()["oracle_count"], 1)

    def test_capacity(self):
        for i in range(MAX_ORACLES):
            self.engine.add_oracle("admin", f"oracle-{i}", 10)
        with self.assertRaises(CapacityExceededError):
            self.engine.add_oracle("admin", "oracle-extra", 10)
        self.assertIsNone(self.engine.get_oracle("oracle-extra"))

    def test_deactivation_frees_a_slot(self):
        for i in range(MAX_ORACLES):
            self.engine.add_oracle("admin", f"oracle-{i}", 10)
        self.engine.deactivate_oracle("admin", "oracle-0")
        self.engine.add_oracle("admin", "oracle-extra", 10)
        self.assertEqual(self.engine.counters()["oracle_count"], MAX_ORACLES)

    def test_deactivate(self):
        self.engine.add_oracle("admin", "oracle-1", 10)
        oracle = self.engine.deactivate_oracle("admin", "oracle-1")
        self.assertFalse(oracle.active)
        self.assertFalse(self.engine.is_authorized_oracle("oracle-1"))
        self.assertEqual(self.engine.counters()["oracle_count"], 0)

    def test_deactivate_twice(self):
        self.engine.add_oracle("admin", "oracle-1", 10)
        self.engine.deactivate_oracle("admin", "oracle-1")
        with self.assertRaises(InvalidOracleError):
            self.engine.deactivate_oracle("admin", "oracle-1")
        self.assertEqual(self.engine.counters()["oracle_count"], 0)

    def test_deactivate_unknown(self):
        with self.assertRaises(InvalidOracleError):
            self.engine.deactivate_oracle("admin", "ghost")

    def test_reactivation_is_a_duplicate(self):
        self.engine.add_oracle("admin", "oracle-1", 10)
        self.engine.deactivate_oracle("admin", "oracle-1")
        with self.assertRaises(AlreadyExistsError):
            self.engine.add_oracle("admin", "oracle-1", 10)

    def test_oracles_hold_no_admin_rights(self):
        self.engine.add_oracle("admin", "oracle-1", 10)
        with self.assertRaises(UnauthorizedError):
            self.engine.deactivate_oracle("oracle-1", "oracle-1")


class TestReputationFeedback(unittest.TestCase):

    def setUp(self):
        self.clock = ManualClock(100)
        self.engine = ComplianceEngine(admins=["admin"], clock=self.clock)
        self.engine.register_entity("admin", "acme", "Acme Corp")

    def _submit(self, oracle):
        return self.engine.submit_compliance_data(
            oracle, "acme", evidence_digest("evidence"), [80]
        )

    def test_submission_is_a_positive_event(self):
        self.engine.add_oracle("admin", "oracle-1", 10)
        self.clock.advance(5)
        self._submit("oracle-1")
        oracle = self.engine.get_oracle("oracle-1")
        self.assertEqual(oracle.reputation_score, 15)
        self.assertEqual(oracle.total_reports, 1)
        self.assertEqual(oracle.last_activity, 105)

    def test_validation_adjusts_reputation(self):
        self.engine.add_oracle("admin", "oracle-1", 10)
        report_id = self._submit("oracle-1")
        self.engine.validate_report("admin", "acme", report_id, True)
        self.assertEqual(self.engine.get_oracle("oracle-1").reputation_score, 20)
        self.engine.validate_report("admin", "acme", report_id, False)
        self.assertEqual(self.engine.get_oracle("oracle-1").reputation_score, 18)
        self.assertFalse(self.engine.get_report("acme", report_id).validated)

    def test_underflow_leaves_report_untouched(self):
        self.engine.add_oracle("admin", "oracle-1", 0)
        first = self._submit("oracle-1")
        second = self._submit("oracle-1")
        self.engine.validate_report("admin", "acme", first, True)   # 15
        for _ in range(7):
            self.engine.validate_report("admin", "acme", second, False)
        self.assertEqual(self.engine.get_oracle("oracle-1").reputation_score, 1)

        with self.assertRaises(ArithmeticRangeError):
            self.engine.validate_report("admin", "acme", first, False)
        self.assertTrue(self.engine.get_report("acme", first).validated)
        self.assertEqual(self.engine.get_oracle("oracle-1").reputation_score, 1)

    def test_deactivated_oracle_still_receives_feedback(self):
        self.engine.add_oracle("admin", "oracle-1", 10)
        report_id = self._submit("oracle-1")
        self.engine.deactivate_oracle("admin", "oracle-1")
        self.engine.validate_report("admin", "acme", report_id, False)
        self.assertEqual(self.engine.get_oracle("oracle-1").reputation_score, 13)


if __name__ == "__main__":
    unittest.main()
