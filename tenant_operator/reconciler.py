"""
Tenant reconciliation loop.

One call to TenantReconciler.reconcile(key) is one fetch-decide-act-persist
cycle:

  1. Fetch the Tenant       (gone → nothing to do)
  2. Deleting?              ensure Namespace absent → drop finalizer → stop
  3. Finalizer missing?     add it and persist BEFORE provisioning
  4. Ensure Namespace       → TenantReady=True  | NamespaceNotReady=False
  5. Persist status
  6. Raise the provisioning error, if any, so the caller retries

Every step is idempotent, so the loop is safe to re-run immediately or
after any delay, from whatever state the previous attempt persisted.
The loop holds no locks and no state between calls. Overlapping runs for
the same key are resolved by the resourceVersion precondition on every
Tenant write: the stale one fails with ConflictError.
"""
import logging
import time
from dataclasses import dataclass
from typing import Optional

from .conditions import (
    NAMESPACE_NOT_READY,
    REASON_ALL_READY,
    REASON_NAMESPACE_NOT_READY,
    TENANT_READY,
    set_condition,
)
from .config import Settings, settings as default_settings
from .errors import ProvisionError
from .events import EVENT_TYPE_NORMAL, MESSAGE_NAMESPACE_READY, REASON_NAMESPACE_READY
from .finalizer import GateAction, LifecycleState, decide, gate_action, with_finalizer, without_finalizer
from .metrics import RECONCILE_DURATION, RECONCILES
from .models import ConditionStatus, Tenant, TenantKey
from .provisioner import namespace_labels, namespace_name

logger = logging.getLogger("tenant-operator.reconciler")

MESSAGE_ALL_READY = "All subresources are ready"
MESSAGE_NAMESPACE_FAILED = "Failed to add namespace for tenant"


@dataclass
class ReconcileResult:
    """Outcome of a successful reconciliation. Failures are raised instead."""
    state: Optional[LifecycleState] = None
    namespace_created: bool = False
    requeue: bool = False
    requeue_after: Optional[float] = None


class TenantReconciler:
    def __init__(self, store, provisioner, recorder, settings: Settings = default_settings):
        self.store = store
        self.provisioner = provisioner
        self.recorder = recorder
        self.settings = settings

    @property
    def finalizer(self) -> str:
        return self.settings.TENANT_FINALIZER

    def reconcile(self, key: TenantKey) -> ReconcileResult:
        started = time.monotonic()
        branch = "unknown"
        try:
            tenant = self.store.get(key)
            if tenant is None:
                branch = "gone"
                logger.debug(f"Tenant {key} not found — already deleted")
                result = ReconcileResult()
            else:
                state = decide(tenant, self.finalizer)
                branch = state.value.lower()
                action = gate_action(state)
                if action is GateAction.NOOP:
                    logger.debug(f"Tenant {key} released — nothing to do")
                    result = ReconcileResult(state=state)
                elif action is GateAction.RUN_DELETION_SEQUENCE:
                    result = self._finalize(tenant)
                else:
                    result = self._converge(tenant)
        except Exception:
            RECONCILES.labels(branch=branch, result="error").inc()
            raise
        finally:
            RECONCILE_DURATION.observe(time.monotonic() - started)
        RECONCILES.labels(branch=branch, result="success").inc()
        return result

    def _finalize(self, tenant: Tenant) -> ReconcileResult:
        """Deletion branch: the finalizer only goes once the Namespace is confirmed gone."""
        ns_name = namespace_name(tenant.spec)
        logger.info(f"Finalizing Tenant {tenant.key} — removing namespace {ns_name}")
        # ProvisionError propagates with the token still in place
        self.provisioner.ensure_absent(ns_name)
        self.store.update_finalizers(
            tenant, without_finalizer(tenant.metadata.finalizers, self.finalizer)
        )
        logger.info(f"Tenant {tenant.key} released")
        return ReconcileResult(state=LifecycleState.RELEASED)

    def _converge(self, tenant: Tenant) -> ReconcileResult:
        spec = tenant.spec
        logger.info(f"Reconciling Tenant {tenant.key} (userId={spec.userId}, plan={spec.plan})")

        if not tenant.has_finalizer(self.finalizer):
            tenant = self.store.update_finalizers(
                tenant, with_finalizer(tenant.metadata.finalizers, self.finalizer)
            )
            logger.info(f"Finalizer added to Tenant {tenant.key}")

        ns_name = namespace_name(spec)
        conditions = tenant.status.conditions
        bump = self.settings.BUMP_TRANSITION_TIME_ALWAYS
        failure: Optional[ProvisionError] = None
        created = False

        try:
            created = self.provisioner.ensure_exists(ns_name, namespace_labels(spec, self.settings))
        except ProvisionError as e:
            logger.error(f"Failed to add Namespace {ns_name} for Tenant {tenant.key}: {e}")
            failure = e
            set_condition(
                conditions, NAMESPACE_NOT_READY, ConditionStatus.FALSE,
                REASON_NAMESPACE_NOT_READY, f"{MESSAGE_NAMESPACE_FAILED}: {e.detail}",
                bump_always=bump,
            )
        else:
            set_condition(
                conditions, TENANT_READY, ConditionStatus.TRUE,
                REASON_ALL_READY, MESSAGE_ALL_READY,
                bump_always=bump,
            )
            if created:
                self.recorder.event(
                    tenant, EVENT_TYPE_NORMAL, REASON_NAMESPACE_READY, MESSAGE_NAMESPACE_READY
                )

        self.store.update_status(tenant)

        if failure is not None:
            raise failure

        logger.info(f"Reconciling Tenant {tenant.key} complete")
        return ReconcileResult(state=LifecycleState.ACTIVE, namespace_created=created)
