"""
Scoring rule tests.

Score is the truncating mean of the metrics; status and risk bands are
inclusive at their lower bound.
"""

import unittest

from compliance_oracle import (
    ComplianceStatus,
    InvalidDataError,
    RiskCategory,
    compliance_score,
    derive_risk_category,
    derive_status,
)
from compliance_oracle.bounds import bounded, capped_append, validate_digest, validate_metrics


class TestComplianceScore(unittest.TestCase):

    def test_truncating_mean(self):
        self.assertEqual(compliance_score([80, 75, 90]), 81)
        self.assertEqual(compliance_score([1, 2]), 1)
        self.assertEqual(compliance_score([100]), 100)

    def test_empty_metrics_rejected(self):
        with self.assertRaises(InvalidDataError):
            compliance_score([])


class TestStatusBoundaries(unittest.TestCase):

    def test_compliant_at_70(self):
        self.assertEqual(derive_status(70), ComplianceStatus.COMPLIANT)

    def test_non_compliant_at_69(self):
        self.assertEqual(derive_status(69), ComplianceStatus.NON_COMPLIANT)

    def test_non_compliant_at_40(self):
        self.assertEqual(derive_status(40), ComplianceStatus.NON_COMPLIANT)

    def test_critical_at_39(self):
        self.assertEqual(derive_status(39), ComplianceStatus.CRITICAL)

    def test_extremes(self):
        self.assertEqual(derive_status(0), ComplianceStatus.CRITICAL)
        self.assertEqual(derive_status(100), ComplianceStatus.COMPLIANT)


class TestRiskCategory(unittest.TestCase):

    def test_critical_score_is_high_regardless_of_violations(self):
        self.assertEqual(derive_risk_category(39, 0), RiskCategory.HIGH)
        self.assertEqual(derive_risk_category(39, 20), RiskCategory.HIGH)

    def test_non_compliant_with_history_is_medium(self):
        self.assertEqual(derive_risk_category(65, 4), RiskCategory.MEDIUM)

    def test_non_compliant_three_violations_is_low(self):
        self.assertEqual(derive_risk_category(65, 3), RiskCategory.LOW)

    def test_compliant_score_is_low_with_many_violations(self):
        self.assertEqual(derive_risk_category(75, 10), RiskCategory.LOW)


class TestBounds(unittest.TestCase):

    def test_metrics_cap(self):
        self.assertEqual(validate_metrics([1, 2, 3, 4, 5], 5), [1, 2, 3, 4, 5])
        with self.assertRaises(InvalidDataError):
            validate_metrics([1, 2, 3, 4, 5, 6], 5)

    def test_metric_range(self):
        with self.assertRaises(InvalidDataError):
            validate_metrics([101], 5)
        with self.assertRaises(InvalidDataError):
            validate_metrics([-1], 5)

    def test_metric_type(self):
        with self.assertRaises(InvalidDataError):
            validate_metrics([True], 5)
        with self.assertRaises(InvalidDataError):
            validate_metrics(["80"], 5)

    def test_string_is_not_a_sequence(self):
        with self.assertRaises(InvalidDataError):
            bounded("abc", 5, "metrics")

    def test_digest_length(self):
        self.assertEqual(validate_digest(b"\x00" * 32), b"\x00" * 32)
        with self.assertRaises(InvalidDataError):
            validate_digest(b"\x00" * 31)
        with self.assertRaises(InvalidDataError):
            validate_digest("00" * 32)

    def test_capped_append(self):
        items = [1, 2]
        self.assertTrue(capped_append(items, 3, 3))
        self.assertFalse(capped_append(items, 4, 3))
        self.assertEqual(items, [1, 2, 3])


if __name__ == "__main__":
    unittest.main()
