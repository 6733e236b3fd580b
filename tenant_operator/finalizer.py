"""
Finalizer gate — decides whether a Tenant's deletion may proceed.

Three states, derived only from observed metadata (no timers):

    Active    no deletion marker
    Deleting  deletion marker set, our finalizer token still present
    Released  deletion marker set, token gone; the API server may remove the object

Active → Deleting happens outside the operator (someone deletes the Tenant);
Deleting → Released happens when the reconciler drops the token after the
Namespace is confirmed gone.
"""
from enum import Enum
from typing import Iterable, List

from .models import Tenant


class LifecycleState(str, Enum):
    ACTIVE = "Active"
    DELETING = "Deleting"
    RELEASED = "Released"


class GateAction(str, Enum):
    ENSURE_FINALIZER_PRESENT = "EnsureFinalizerPresent"
    RUN_DELETION_SEQUENCE = "RunDeletionSequence"
    NOOP = "NoOp"


_ACTIONS = {
    LifecycleState.ACTIVE: GateAction.ENSURE_FINALIZER_PRESENT,
    LifecycleState.DELETING: GateAction.RUN_DELETION_SEQUENCE,
    LifecycleState.RELEASED: GateAction.NOOP,
}


def lifecycle_state(deleting: bool, finalizers: Iterable[str], token: str) -> LifecycleState:
    if not deleting:
        return LifecycleState.ACTIVE
    if token in finalizers:
        return LifecycleState.DELETING
    return LifecycleState.RELEASED


def gate_action(state: LifecycleState) -> GateAction:
    return _ACTIONS[state]


def decide(tenant: Tenant, token: str) -> LifecycleState:
    return lifecycle_state(tenant.is_deleting, tenant.metadata.finalizers, token)


def with_finalizer(finalizers: Iterable[str], token: str) -> List[str]:
    """Return a copy of finalizers with token appended (if missing)."""
    result = list(finalizers)
    if token not in result:
        result.append(token)
    return result


def without_finalizer(finalizers: Iterable[str], token: str) -> List[str]:
    """Return a copy of finalizers without token; other tokens keep their order."""
    return [f for f in finalizers if f != token]
