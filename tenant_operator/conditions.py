"""
Condition ledger — upsert-by-type over a Tenant's ordered status conditions.

The ledger is the only externally visible record of why a Tenant is or is
not ready. At most one entry exists per condition type; entries are never
removed and keep the position of their first insertion.
"""
from datetime import datetime, timezone
from typing import List, Optional, Union

from .models import Condition, ConditionStatus

# Condition types / reasons written by the reconciler
TENANT_READY = "TenantReady"
NAMESPACE_NOT_READY = "NamespaceNotReady"
REASON_ALL_READY = "AllSubresourcesReady"
REASON_NAMESPACE_NOT_READY = "NamespaceNotReady"


def utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def get_condition(conditions: List[Condition], ctype: str) -> Optional[Condition]:
    for c in conditions:
        if c.type == ctype:
            return c
    return None


def set_condition(
    conditions: List[Condition],
    ctype: str,
    status: Union[ConditionStatus, str],
    reason: str,
    message: str,
    now: Optional[str] = None,
    bump_always: bool = False,
) -> Condition:
    """
    Upsert a condition in a conditions list (in place) and return it.

    lastTransitionTime moves only when the status actually changes, unless
    bump_always is set, in which case every upsert refreshes it.
    """
    status = ConditionStatus(status)
    now = now or utc_now()
    existing = get_condition(conditions, ctype)
    if existing is not None:
        if bump_always or existing.status != status.value:
            existing.lastTransitionTime = now
        existing.status = status.value
        existing.reason = reason
        existing.message = message
        return existing

    condition = Condition(
        type=ctype,
        status=status,
        reason=reason,
        message=message,
        lastTransitionTime=now,
    )
    conditions.append(condition)
    return condition
