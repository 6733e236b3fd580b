"""
Kubernetes client helpers — config is loaded exactly once per process.
"""
import logging

from kubernetes import client, config

from .config import settings

logger = logging.getLogger("tenant-operator.kube")

_k8s_loaded = False


def _ensure_k8s():
    """Load kubeconfig exactly once."""
    global _k8s_loaded
    if _k8s_loaded:
        return
    if settings.IN_CLUSTER:
        config.load_incluster_config()
    else:
        try:
            config.load_incluster_config()
        except config.ConfigException:
            config.load_kube_config(config_file=settings.KUBECONFIG or None)
    _k8s_loaded = True
    logger.debug("Kubernetes client configuration loaded")


def core_api() -> client.CoreV1Api:
    _ensure_k8s()
    return client.CoreV1Api()


def custom_api() -> client.CustomObjectsApi:
    _ensure_k8s()
    return client.CustomObjectsApi()
