import logging
import threading
from dataclasses import asdict, fields, replace
from typing import Any, Dict, Optional

from common.models.refund_policy import RefundPolicy
from common.utils.custom_exceptions import InvalidPolicy


logger = logging.getLogger(__name__)

_POLICY_FIELDS = {f.name for f in fields(RefundPolicy)}


class RefundPolicyRepository:
    """Holds the single active refund policy."""

    def __init__(self, policy: Optional[RefundPolicy] = None):
        policy = policy or RefundPolicy()
        errors = policy.violations()
        if errors:
            raise InvalidPolicy(errors)
        self._policy = replace(policy)
        self._lock = threading.Lock()

    def get(self) -> RefundPolicy:
        with self._lock:
            return replace(self._policy)

    def set(self, changes: Dict[str, Any]) -> RefundPolicy:
        unknown = set(changes) - _POLICY_FIELDS
        if unknown:
            raise InvalidPolicy([f"unknown policy fields: {sorted(unknown)}"])

        with self._lock:
            merged = replace(
                self._policy, **{k: v for k, v in changes.items() if v is not None}
            )
            errors = merged.violations()
            if errors:
                logger.warning(f"Rejected refund policy update {changes}: {errors}")
                raise InvalidPolicy(errors)

            self._policy = merged
            logger.info(f"Refund policy updated to {asdict(merged)}")
            return replace(merged)
