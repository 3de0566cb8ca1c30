"""
Oracle Registry

Tracks which identities may submit attestations and how far each one is
trusted. Oracles are never deleted; deactivation only clears ``active``.
"""

from typing import Optional

from .config import MAX_ORACLES, REPUTATION_PENALTY, REPUTATION_REWARD
from .errors import (
    AlreadyExistsError,
    ArithmeticRangeError,
    CapacityExceededError,
    InvalidDataError,
    InvalidOracleError,
)
from .logging_config import ComplianceEventLogger, event_log
from .records import ORACLE_COUNT, Oracle
from .store import StateStore


def adjusted_reputation(score: int, positive: bool) -> int:
    """
    Apply one reputation event.

    A positive event adds REPUTATION_REWARD, a negative one subtracts
    REPUTATION_PENALTY. Reputation is unsigned: a subtraction that would
    drop below zero raises ArithmeticRangeError instead of clamping.
    """
    if positive:
        return score + REPUTATION_REWARD
    if score < REPUTATION_PENALTY:
        raise ArithmeticRangeError(
            f"reputation {score} cannot absorb a penalty of {REPUTATION_PENALTY}"
        )
    return score - REPUTATION_PENALTY


class OracleRegistry:
    """Authorized oracle set with a fixed number of active slots."""

    def __init__(self, store: StateStore, events: ComplianceEventLogger = event_log):
        self.store = store
        self.events = events

    def get(self, identity: str) -> Optional[Oracle]:
        return self.store.get_oracle(identity)

    def is_authorized(self, identity: Optional[str]) -> bool:
        """Registered and active."""
        if not identity:
            return False
        oracle = self.store.get_oracle(identity)
        return oracle is not None and oracle.active

    def active_count(self) -> int:
        return self.store.get_counter(ORACLE_COUNT)

    def add(self, identity: str, initial_reputation: int, now: int) -> Oracle:
        if not identity:
            raise InvalidDataError("oracle identity is required")
        if isinstance(initial_reputation, bool) or not isinstance(initial_reputation, int) \
                or initial_reputation < 0:
            raise InvalidDataError("initial reputation must be a non-negative integer")

        with self.store.transaction():
            if self.store.get_oracle(identity) is not None:
                raise AlreadyExistsError(f"oracle {identity} already registered")
            if self.active_count() >= MAX_ORACLES:
                raise CapacityExceededError(f"oracle limit of {MAX_ORACLES} reached")

            oracle = Oracle(
                identity=identity,
                active=True,
                reputation_score=initial_reputation,
                total_reports=0,
                last_activity=now,
            )
            self.store.put_oracle(oracle)
            self.store.adjust_counter(ORACLE_COUNT, 1)

        self.events.oracle_added(identity, initial_reputation, now)
        return oracle

    def deactivate(self, identity: str, now: int) -> Oracle:
        with self.store.transaction():
            oracle = self.store.get_oracle(identity)
            if oracle is None:
                raise InvalidOracleError(f"oracle {identity} not registered")
            if not oracle.active:
                raise InvalidOracleError(f"oracle {identity} already inactive")

            oracle.active = False
            self.store.put_oracle(oracle)
            self.store.adjust_counter(ORACLE_COUNT, -1)

        self.events.oracle_deactivated(identity, now)
        return oracle

    def apply_reputation(self, oracle: Oracle, positive: bool) -> Oracle:
        """Adjust reputation and persist. Raises before writing on underflow."""
        previous = oracle.reputation_score
        oracle.reputation_score = adjusted_reputation(previous, positive)
        self.store.put_oracle(oracle)
        self.events.reputation_adjusted(oracle.identity, previous, oracle.reputation_score)
        return oracle

    def record_attestation(self, identity: str, now: int) -> Oracle:
        """A submitted report counts as a positive reputation event."""
        oracle = self.store.get_oracle(identity)
        if oracle is None:
            raise InvalidOracleError(f"oracle {identity} not registered")
        oracle.total_reports += 1
        oracle.last_activity = now
        return self.apply_reputation(oracle, positive=True)
