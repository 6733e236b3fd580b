"""
Tenant Operator — kopf wiring for the Tenant reconciliation loop.

Architecture:
  Tenant CRD → kopf watches → TenantReconciler.reconcile(namespace/name)
    - create / update / resume / periodic resync → converge branch
      (finalizer, namespace, TenantReady / NamespaceNotReady conditions)
    - delete → deletion branch
      (namespace removed first, finalizer released last)

  kopf supplies what the reconciler treats as external:
    - serialized create / update / resume / delete handling per object,
      up to MAX_WORKERS objects in parallel
    - retry with backoff when a handler raises kopf.TemporaryError
    - Kubernetes Event posting

  The finalizer kopf guards deletions with is the operator's own token,
  so both agree on when a Tenant may disappear. The reconciler removes it
  itself once the namespace is confirmed gone.

  The resync timer runs as its own task beside that per-object handling,
  and deletion does not wait for it because the reconciler releases the
  shared finalizer itself. A timer pass can therefore overlap a handler
  pass for the same Tenant; the resourceVersion preconditions on every
  Tenant write are what bound that overlap (the loser gets ConflictError
  and retries from fresh state).

Run with:
  kopf run -m tenant_operator.handlers --all-namespaces
"""

import logging

import kopf

from .config import settings as operator_settings
from .errors import ConflictError, PermanentInputError
from .events import EventRecorder
from .metrics import start_metrics_server
from .models import TenantKey
from .provisioner import NamespaceProvisioner
from .reconciler import TenantReconciler
from .store import TenantStore

logger = logging.getLogger("tenant-operator")

CRD_GROUP = operator_settings.CRD_GROUP
CRD_VERSION = operator_settings.CRD_VERSION
CRD_PLURAL = operator_settings.CRD_PLURAL

_reconciler = None


def get_reconciler() -> TenantReconciler:
    """Build the reconciler exactly once per process."""
    global _reconciler
    if _reconciler is None:
        _reconciler = TenantReconciler(
            store=TenantStore(settings=operator_settings),
            provisioner=NamespaceProvisioner(),
            recorder=EventRecorder(settings=operator_settings),
            settings=operator_settings,
        )
    return _reconciler


# ---------------------------------------------------------------------------
# Kopf operator settings
# ---------------------------------------------------------------------------

@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **kwargs):
    logging.getLogger("tenant-operator").setLevel(operator_settings.LOG_LEVEL.upper())
    settings.posting.enabled = True
    settings.persistence.finalizer = operator_settings.TENANT_FINALIZER
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage(
        prefix=operator_settings.CRD_GROUP
    )
    settings.execution.max_workers = operator_settings.MAX_WORKERS
    start_metrics_server(operator_settings.METRICS_PORT)
    logger.info(
        f"Tenant Operator started (max_workers={operator_settings.MAX_WORKERS}, "
        f"resource={operator_settings.CRD_PLURAL}.{operator_settings.CRD_GROUP}/"
        f"{operator_settings.CRD_VERSION}, finalizer={operator_settings.TENANT_FINALIZER})"
    )


# ---------------------------------------------------------------------------
# CREATE / UPDATE / RESUME / RESYNC — converge branch
# ---------------------------------------------------------------------------

@kopf.on.create(CRD_GROUP, CRD_VERSION, CRD_PLURAL)
@kopf.on.update(CRD_GROUP, CRD_VERSION, CRD_PLURAL)
@kopf.on.resume(CRD_GROUP, CRD_VERSION, CRD_PLURAL)
@kopf.timer(CRD_GROUP, CRD_VERSION, CRD_PLURAL,
            interval=operator_settings.RESYNC_INTERVAL, idle=operator_settings.RESYNC_INTERVAL)
def reconcile_tenant(name, namespace, logger, **kwargs):
    """Converge a live Tenant: finalizer, namespace, status conditions."""
    key = TenantKey(namespace, name)
    try:
        get_reconciler().reconcile(key)
    except ConflictError as e:
        logger.info(f"Tenant {key}: {e} — retrying")
        raise kopf.TemporaryError(str(e), delay=operator_settings.CONFLICT_RETRY_DELAY)
    except PermanentInputError as e:
        logger.error(f"Tenant {key}: {e} — not retrying")
        raise kopf.PermanentError(str(e))
    except Exception as e:
        logger.error(f"Tenant {key} reconcile failed: {e}")
        raise kopf.TemporaryError(str(e), delay=operator_settings.RETRY_DELAY)


# ---------------------------------------------------------------------------
# DELETE — cleanup with finalizer guarantee
# ---------------------------------------------------------------------------

@kopf.on.delete(CRD_GROUP, CRD_VERSION, CRD_PLURAL)
def finalize_tenant(name, namespace, logger, **kwargs):
    """
    Remove the Tenant's namespace, then release the finalizer.

    Every failure is temporary here: giving up would let the Tenant
    disappear while its namespace is still around.
    """
    key = TenantKey(namespace, name)
    try:
        get_reconciler().reconcile(key)
    except ConflictError as e:
        logger.info(f"Tenant {key}: {e} — retrying")
        raise kopf.TemporaryError(str(e), delay=operator_settings.CONFLICT_RETRY_DELAY)
    except Exception as e:
        logger.error(f"Tenant {key} cleanup failed: {e}")
        raise kopf.TemporaryError(str(e), delay=operator_settings.RETRY_DELAY)
