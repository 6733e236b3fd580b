"""
Tenant store — reads and writes Tenant custom objects.

Every write is a JSON merge patch that carries the resourceVersion the
caller last observed. The API server rejects it with 409 if the object
has moved on, so a racing reconciliation fails cleanly (ConflictError)
instead of overwriting someone else's edit.
"""
import logging
from typing import List, Optional

from kubernetes import client
from kubernetes.client import ApiException

from .config import Settings, settings as default_settings
from .errors import ConflictError
from .models import Tenant, TenantKey

logger = logging.getLogger("tenant-operator.store")


class TenantStore:
    def __init__(self, api: Optional[client.CustomObjectsApi] = None,
                 settings: Settings = default_settings):
        self._api = api
        self.settings = settings

    @property
    def api(self) -> client.CustomObjectsApi:
        if self._api is None:
            from .kube import custom_api
            self._api = custom_api()
        return self._api

    def _crd(self) -> tuple:
        s = self.settings
        return s.CRD_GROUP, s.CRD_VERSION

    def get(self, key: TenantKey) -> Optional[Tenant]:
        """Get a Tenant by key. Returns None if it no longer exists."""
        group, version = self._crd()
        try:
            if key.namespace:
                body = self.api.get_namespaced_custom_object(
                    group, version, key.namespace, self.settings.CRD_PLURAL, key.name
                )
            else:
                body = self.api.get_cluster_custom_object(
                    group, version, self.settings.CRD_PLURAL, key.name
                )
        except ApiException as e:
            if e.status == 404:
                return None
            raise
        return Tenant.from_body(body)

    def update_finalizers(self, tenant: Tenant, finalizers: List[str]) -> Tenant:
        """Replace metadata.finalizers, guarded by the observed resourceVersion."""
        patch = {
            "metadata": {
                "resourceVersion": tenant.metadata.resourceVersion,
                "finalizers": list(finalizers),
            },
        }
        body = self._patch(tenant, patch, status=False)
        logger.debug(f"Tenant {tenant.key} finalizers -> {finalizers}")
        return Tenant.from_body(body)

    def update_status(self, tenant: Tenant) -> Tenant:
        """Write the status subresource, guarded by the observed resourceVersion."""
        patch = {
            "metadata": {"resourceVersion": tenant.metadata.resourceVersion},
            "status": tenant.status.model_dump(mode="json"),
        }
        body = self._patch(tenant, patch, status=True)
        return Tenant.from_body(body)

    def _patch(self, tenant: Tenant, patch: dict, status: bool) -> dict:
        group, version = self._crd()
        plural = self.settings.CRD_PLURAL
        key = tenant.key
        try:
            if key.namespace:
                fn = (self.api.patch_namespaced_custom_object_status if status
                      else self.api.patch_namespaced_custom_object)
                return fn(group, version, key.namespace, plural, key.name, patch)
            fn = (self.api.patch_cluster_custom_object_status if status
                  else self.api.patch_cluster_custom_object)
            return fn(group, version, plural, key.name, patch)
        except ApiException as e:
            if e.status == 409:
                raise ConflictError(
                    self.settings.CRD_KIND, str(key), tenant.metadata.resourceVersion
                ) from e
            raise
