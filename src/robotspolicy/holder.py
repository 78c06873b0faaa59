import logging
import threading
from typing import Optional, Union

from .evaluator import Decision, EvaluatorOptions, explain
from .policy import Policy, parse

log = logging.getLogger(__name__)


class PolicyHolder:
    """
    Shared reference to the policy currently in force.

    Policies are immutable, so readers take `current` without locking. A refresh
    builds a complete new Policy first and only then swaps the reference, so a
    reader sees either the old policy or the new one, never a mix.
    """

    def __init__(self, policy: Optional[Policy] = None, options: Optional[EvaluatorOptions] = None):
        self._policy = policy if policy is not None else Policy()
        self._lock = threading.Lock()
        self.options = options

    @property
    def current(self) -> Policy:
        return self._policy

    def replace(self, policy: Policy) -> Policy:
        """Install `policy` and return the one it replaced."""
        if not isinstance(policy, Policy):
            raise TypeError(f"expected a Policy, not {type(policy).__name__}")
        with self._lock:
            previous, self._policy = self._policy, policy
        return previous

    def refresh(self, raw: Union[bytes, bytearray, str]) -> Policy:
        policy = parse(raw)
        self.replace(policy)
        log.debug("policy refreshed: %d group(s)", len(policy.groups))
        return policy

    def explain(self, agent: str, path: str) -> Decision:
        return explain(self.current, agent, path, self.options)

    def is_allowed(self, agent: str, path: str) -> bool:
        return self.explain(agent, path).allowed
