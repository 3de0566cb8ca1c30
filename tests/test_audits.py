"""
Audit log tests.
"""

import unittest

from compliance_oracle import (
    ComplianceEngine,
    InvalidDataError,
    ManualClock,
    NotFoundError,
    UnauthorizedError,
    follow_up_required,
)


class TestFollowUpRule(unittest.TestCase):

    def test_boundary(self):
        self.assertFalse(follow_up_required([50]))
        self.assertFalse(follow_up_required([20, 30]))
        self.assertTrue(follow_up_required([51]))
        self.assertTrue(follow_up_required([25, 26]))

    def test_no_findings(self):
        self.assertFalse(follow_up_required([]))


class TestConductAudit(unittest.TestCase):

    def setUp(self):
        self.clock = ManualClock(500)
        self.engine = ComplianceEngine(admins=["admin"], clock=self.clock)
        self.engine.add_oracle("admin", "auditor-1", 10)
        self.engine.register_entity("admin", "acme", "Acme Corp")

    def test_record_audit(self):
        self.clock.advance(7)
        audit_id = self.engine.conduct_entity_audit(
            "auditor-1", "acme", "SOX-404", [10, 20, 21], "tighten controls"
        )
        self.assertEqual(audit_id, 1)

        audit = self.engine.get_audit("acme", audit_id)
        self.assertEqual(audit.auditor, "auditor-1")
        self.assertEqual(audit.audit_type, "SOX-404")
        self.assertEqual(audit.findings, [10, 20, 21])
        self.assertEqual(audit.recommendations, "tighten controls")
        self.assertTrue(audit.follow_up_required)
        self.assertEqual(audit.timestamp, 507)
        self.assertEqual(self.engine.counters()["next_audit_id"], 2)

    def test_audit_does_not_touch_entity(self):
        before = self.engine.get_entity("acme")
        self.engine.conduct_entity_audit("auditor-1", "acme", "KYC", [60])
        self.assertEqual(self.engine.get_entity("acme"), before)

    def test_audit_ids_increase(self):
        first = self.engine.conduct_entity_audit("auditor-1", "acme", "KYC", [1])
        second = self.engine.conduct_entity_audit("auditor-1", "acme", "KYC", [2])
        self.assertEqual((first, second), (1, 2))
        self.assertFalse(self.engine.get_audit("acme", second).follow_up_required)

    def test_empty_findings_allowed(self):
        audit_id = self.engine.conduct_entity_audit("auditor-1", "acme", "KYC", [])
        self.assertFalse(self.engine.get_audit("acme", audit_id).follow_up_required)

    def test_too_many_findings(self):
        with self.assertRaises(InvalidDataError):
            self.engine.conduct_entity_audit("auditor-1", "acme", "KYC", [1] * 11)
        self.assertEqual(self.engine.counters()["next_audit_id"], 1)

    def test_negative_finding(self):
        with self.assertRaises(InvalidDataError):
            self.engine.conduct_entity_audit("auditor-1", "acme", "KYC", [5, -1])

    def test_unknown_entity(self):
        with self.assertRaises(NotFoundError):
            self.engine.conduct_entity_audit("auditor-1", "ghost", "KYC", [1])

    def test_requires_active_oracle(self):
        with self.assertRaises(UnauthorizedError):
            self.engine.conduct_entity_audit("admin", "acme", "KYC", [1])
        self.engine.deactivate_oracle("admin", "auditor-1")
        with self.assertRaises(UnauthorizedError):
            self.engine.conduct_entity_audit("auditor-1", "acme", "KYC", [1])

    def test_allowed_while_paused(self):
        self.engine.pause("admin")
        audit_id = self.engine.conduct_entity_audit("auditor-1", "acme", "KYC", [1])
        self.assertIsNotNone(self.engine.get_audit("acme", audit_id))


if __name__ == "__main__":
    unittest.main()
