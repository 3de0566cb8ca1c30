"""
Structured logging and compliance event tests.
"""

import json
import logging
import unittest

from compliance_oracle import ComplianceEngine, ManualClock, UnauthorizedError, evidence_digest
from compliance_oracle.logging_config import (
    StructuredFormatter,
    get_request_id,
    set_request_id,
)

EVENTS = "compliance_oracle.events"


class TestEventLogging(unittest.TestCase):

    def setUp(self):
        self.engine = ComplianceEngine(admins=["admin"], clock=ManualClock(10))

    def event_types(self, cm):
        return [r.extra_fields["event_type"] for r in cm.records]

    def test_state_transitions_are_logged(self):
        with self.assertLogs(EVENTS, level="INFO") as cm:
            self.engine.add_oracle("admin", "o1", 10)
            self.engine.register_entity("admin", "acme", "Acme")
            self.engine.submit_compliance_data("o1", "acme", evidence_digest("x"), [10])
        self.assertEqual(self.event_types(cm), [
            "ORACLE_ADDED",
            "ENTITY_REGISTERED",
            "ESCALATION_CREATED",
            "REPUTATION_ADJUSTED",
            "REPORT_SUBMITTED",
        ])
        submitted = cm.records[-1]
        self.assertEqual(submitted.levelno, logging.WARNING)
        self.assertEqual(submitted.extra_fields["status"], "CRITICAL")

    def test_rejections_are_logged(self):
        with self.assertLogs(EVENTS, level="WARNING") as cm:
            with self.assertRaises(UnauthorizedError):
                self.engine.register_entity("mallory", "acme", "Acme")
        record = cm.records[0]
        self.assertEqual(record.extra_fields["event_type"], "OPERATION_REJECTED")
        self.assertEqual(record.extra_fields["operation"], "register_entity")
        self.assertEqual(record.extra_fields["code"], "UNAUTHORIZED")
        self.assertEqual(record.extra_fields["caller"], "mallory")


class TestStructuredFormatter(unittest.TestCase):

    def test_json_line(self):
        set_request_id("req-123")
        try:
            record = logging.LogRecord("compliance_oracle.events", logging.INFO, __file__, 1,
                                       "hello", (), None)
            record.extra_fields = {"event_type": "TEST", "entity": "acme"}
            data = json.loads(StructuredFormatter().format(record))
        finally:
            set_request_id("")
        self.assertEqual(data["message"], "hello")
        self.assertEqual(data["level"], "INFO")
        self.assertEqual(data["request_id"], "req-123")
        self.assertEqual(data["event_type"], "TEST")
        self.assertEqual(data["entity"], "acme")

    def test_generated_request_id(self):
        request_id = set_request_id()
        try:
            self.assertEqual(get_request_id(), request_id)
            self.assertEqual(len(request_id), 36)
        finally:
            set_request_id("")


if __name__ == "__main__":
    unittest.main()
