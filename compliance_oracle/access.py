"""
Caller capability checks.

Authentication happens outside the engine: callers arrive with an already
established identity, and the engine only asks two questions about it.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from .store import StateStore


class AccessPolicy(ABC):
    """Capability predicates over an authenticated caller identity."""

    @abstractmethod
    def is_admin(self, caller: Optional[str]) -> bool:
        pass

    @abstractmethod
    def is_active_oracle(self, caller: Optional[str]) -> bool:
        pass


class RegistryAccessPolicy(AccessPolicy):
    """
    Administrators come from a fixed set; oracle capability is read from the
    oracle registry on every check.
    """

    def __init__(self, store: StateStore, admins: Iterable[str]):
        self.store = store
        self.admins = frozenset(admins)
        if not self.admins:
            raise ValueError("at least one administrator identity is required")

    def is_admin(self, caller: Optional[str]) -> bool:
        return caller is not None and caller in self.admins

    def is_active_oracle(self, caller: Optional[str]) -> bool:
        if not caller:
            return False
        oracle = self.store.get_oracle(caller)
        return oracle is not None and oracle.active
