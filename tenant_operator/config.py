"""
Configuration module — all settings from env vars with sensible defaults.
Follows 12-factor app methodology.
"""
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    # Kubernetes
    KUBECONFIG: str = os.environ.get("KUBECONFIG", "")
    IN_CLUSTER: bool = os.environ.get("IN_CLUSTER", "false").lower() == "true"

    # CRD
    CRD_GROUP: str = os.environ.get("CRD_GROUP", "kleff.kleff.io")
    CRD_VERSION: str = os.environ.get("CRD_VERSION", "v1")
    CRD_PLURAL: str = os.environ.get("CRD_PLURAL", "tenants")
    CRD_KIND: str = os.environ.get("CRD_KIND", "Tenant")
    TENANT_FINALIZER: str = os.environ.get("TENANT_FINALIZER", "tenants.kleff.kleff.io/finalizer")

    # Namespace labelling
    MESH_INJECTION_LABEL: str = os.environ.get("MESH_INJECTION_LABEL", "istio-injection")
    MESH_INJECTION_VALUE: str = os.environ.get("MESH_INJECTION_VALUE", "enabled")

    # Notifications
    EVENT_SOURCE: str = os.environ.get("EVENT_SOURCE", "tenant-controller")
    REDIS_URL: str = os.environ.get("REDIS_URL", "")

    # Scheduling / retries (seconds)
    MAX_WORKERS: int = int(os.environ.get("MAX_WORKERS", "5"))
    RETRY_DELAY: int = int(os.environ.get("RETRY_DELAY", "15"))
    CONFLICT_RETRY_DELAY: int = int(os.environ.get("CONFLICT_RETRY_DELAY", "1"))
    RESYNC_INTERVAL: int = int(os.environ.get("RESYNC_INTERVAL", "300"))

    # Refresh lastTransitionTime on every condition upsert, not only on status changes
    BUMP_TRANSITION_TIME_ALWAYS: bool = (
        os.environ.get("BUMP_TRANSITION_TIME_ALWAYS", "false").lower() == "true"
    )

    # Observability
    METRICS_PORT: int = int(os.environ.get("METRICS_PORT", "0"))
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    @property
    def api_version(self) -> str:
        return f"{self.CRD_GROUP}/{self.CRD_VERSION}"


settings = Settings()
