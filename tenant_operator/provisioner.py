"""
Namespace provisioner — idempotent ensure-exists / ensure-absent for the
one Namespace owned by each Tenant.

Naming and labelling are deterministic functions of the Tenant spec:
  name   = spec.userId (verbatim, validated upstream)
  labels = mesh-injection marker + tenant-username + tenant-plan

Labels are applied at creation time only; an existing Namespace is left
as found.
"""
import logging
from typing import Dict, Optional

from kubernetes import client
from kubernetes.client import ApiException

from .config import Settings, settings as default_settings
from .errors import PermanentInputError, ProvisionError
from .metrics import NAMESPACE_OPERATIONS
from .models import TenantSpec

logger = logging.getLogger("tenant-operator.provisioner")

LABEL_USERNAME = "tenant-username"
LABEL_PLAN = "tenant-plan"

# API server verdicts that no amount of retrying will change
_PERMANENT_STATUSES = {400, 422}


def namespace_name(spec: TenantSpec) -> str:
    return spec.userId


def namespace_labels(spec: TenantSpec, settings: Settings = default_settings) -> Dict[str, str]:
    return {
        settings.MESH_INJECTION_LABEL: settings.MESH_INJECTION_VALUE,
        LABEL_USERNAME: spec.username,
        LABEL_PLAN: spec.plan,
    }


def _provision_error(operation: str, name: str, e: ApiException) -> ProvisionError:
    cls = PermanentInputError if e.status in _PERMANENT_STATUSES else ProvisionError
    return cls(operation, name, e, status=e.status)


class NamespaceProvisioner:
    def __init__(self, api: Optional[client.CoreV1Api] = None):
        self._api = api

    @property
    def api(self) -> client.CoreV1Api:
        if self._api is None:
            from .kube import core_api
            self._api = core_api()
        return self._api

    def ensure_exists(self, name: str, labels: Dict[str, str]) -> bool:
        """Create namespace idempotently. Returns True if created, False if it existed."""
        try:
            self.api.read_namespace(name=name)
            logger.debug(f"Namespace {name} already exists")
            NAMESPACE_OPERATIONS.labels(operation="ensure_exists", result="present").inc()
            return False
        except ApiException as e:
            if e.status != 404:
                NAMESPACE_OPERATIONS.labels(operation="ensure_exists", result="error").inc()
                raise _provision_error("read", name, e) from e

        try:
            self.api.create_namespace(
                client.V1Namespace(
                    metadata=client.V1ObjectMeta(name=name, labels=dict(labels))
                )
            )
        except ApiException as e:
            if e.status == 409:
                # Created between our read and create; still converged
                logger.info(f"Namespace {name} already exists")
                NAMESPACE_OPERATIONS.labels(operation="ensure_exists", result="present").inc()
                return False
            NAMESPACE_OPERATIONS.labels(operation="ensure_exists", result="error").inc()
            raise _provision_error("create", name, e) from e

        logger.info(f"Namespace {name} created")
        NAMESPACE_OPERATIONS.labels(operation="ensure_exists", result="created").inc()
        return True

    def ensure_absent(self, name: str) -> bool:
        """Delete namespace, ignore 404. Returns True if the namespace is (now) terminating."""
        try:
            self.api.delete_namespace(name=name)
        except ApiException as e:
            if e.status == 404:
                logger.info(f"Namespace {name} already gone")
                NAMESPACE_OPERATIONS.labels(operation="ensure_absent", result="absent").inc()
                return False
            if e.status == 409:
                # Already terminating from an earlier pass
                logger.info(f"Namespace {name} deletion already in progress")
                NAMESPACE_OPERATIONS.labels(operation="ensure_absent", result="deleted").inc()
                return True
            NAMESPACE_OPERATIONS.labels(operation="ensure_absent", result="error").inc()
            raise _provision_error("delete", name, e) from e

        logger.info(f"Namespace {name} deletion initiated")
        NAMESPACE_OPERATIONS.labels(operation="ensure_absent", result="deleted").inc()
        return True
