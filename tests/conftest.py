"""Shared fixtures: in-memory stand-ins for the API server."""

import copy
import json

import pytest
from kubernetes.client import ApiException

from tenant_operator.config import Settings
from tenant_operator.errors import ConflictError
from tenant_operator.models import Tenant, TenantKey
from tenant_operator.provisioner import NamespaceProvisioner
from tenant_operator.reconciler import TenantReconciler

FINALIZER = "tenants.kleff.kleff.io/finalizer"


class FakeResponse:
    """Minimal urllib3-style response, as ApiException(http_resp=...) reads it."""

    def __init__(self, status, reason, data=b""):
        self.status = status
        self.reason = reason
        self.data = data
        self.headers = {"Content-Type": "application/json"}

    def getheaders(self):
        return {"Content-Type": "application/json"}


def api_error(status, reason, message=None):
    """ApiException carrying a Kubernetes Status body, as the API server sends it."""
    body = {"kind": "Status", "apiVersion": "v1", "status": "Failure", "reason": reason, "code": status}
    if message is not None:
        body["message"] = message
    return ApiException(http_resp=FakeResponse(status, reason, json.dumps(body).encode()))


def make_tenant_body(name="t1", namespace="default", user_id="u1", username="alice",
                     plan="pro", finalizers=None, deleting=False, conditions=None,
                     resource_version="1"):
    body = {
        "apiVersion": "kleff.kleff.io/v1",
        "kind": "Tenant",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "uid": f"uid-{name}",
            "resourceVersion": resource_version,
            "finalizers": list(finalizers or []),
        },
        "spec": {"userId": user_id, "username": username, "plan": plan},
    }
    if deleting:
        body["metadata"]["deletionTimestamp"] = "2026-01-01T00:00:00Z"
    if conditions is not None:
        body["status"] = {"conditions": conditions}
    return body


class FakeTenantStore:
    """Tenant store keeping raw bodies and enforcing resourceVersion preconditions."""

    def __init__(self):
        self.objects = {}
        self.calls = []
        self.conflict_next_write = False

    def add(self, body):
        key = TenantKey(body["metadata"].get("namespace"), body["metadata"]["name"])
        self.objects[key] = copy.deepcopy(body)
        return key

    def body(self, key):
        return self.objects[key]

    def get(self, key):
        self.calls.append(("get", str(key)))
        body = self.objects.get(key)
        return Tenant.from_body(copy.deepcopy(body)) if body is not None else None

    def _write(self, tenant, op):
        key = tenant.key
        stored = self.objects[key]
        if self.conflict_next_write or stored["metadata"]["resourceVersion"] != tenant.metadata.resourceVersion:
            self.conflict_next_write = False
            raise ConflictError("Tenant", str(key), tenant.metadata.resourceVersion)
        stored["metadata"]["resourceVersion"] = str(int(stored["metadata"]["resourceVersion"]) + 1)
        self.calls.append((op, str(key)))
        return stored

    def update_finalizers(self, tenant, finalizers):
        stored = self._write(tenant, "update_finalizers")
        stored["metadata"]["finalizers"] = list(finalizers)
        # The API server drops a deleting object once its last finalizer is gone
        if stored["metadata"].get("deletionTimestamp") and not finalizers:
            del self.objects[tenant.key]
        return Tenant.from_body(copy.deepcopy(stored))

    def update_status(self, tenant):
        stored = self._write(tenant, "update_status")
        stored["status"] = tenant.status.model_dump(mode="json")
        return Tenant.from_body(copy.deepcopy(stored))

    def writes(self):
        return [op for op, _ in self.calls if op != "get"]


class FakeCoreApi:
    """Namespace half of CoreV1Api, backed by a dict."""

    def __init__(self):
        self.namespaces = {}
        self.calls = []
        self.failures = {}

    def _maybe_fail(self, op):
        exc = self.failures.get(op)
        if exc is not None:
            raise exc

    def read_namespace(self, name):
        self.calls.append(("read", name))
        self._maybe_fail("read")
        if name not in self.namespaces:
            raise ApiException(status=404, reason="Not Found")
        return self.namespaces[name]

    def create_namespace(self, body):
        name = body.metadata.name
        self.calls.append(("create", name))
        self._maybe_fail("create")
        if name in self.namespaces:
            raise ApiException(status=409, reason="AlreadyExists")
        self.namespaces[name] = body
        return body

    def delete_namespace(self, name):
        self.calls.append(("delete", name))
        self._maybe_fail("delete")
        if name not in self.namespaces:
            raise ApiException(status=404, reason="Not Found")
        del self.namespaces[name]

    def ops(self):
        return [op for op, _ in self.calls]


class FakeRecorder:
    def __init__(self):
        self.events = []

    def event(self, tenant, event_type, reason, message):
        self.events.append((tenant.metadata.name, event_type, reason, message))


@pytest.fixture
def operator_settings():
    return Settings(TENANT_FINALIZER=FINALIZER, BUMP_TRANSITION_TIME_ALWAYS=False)


@pytest.fixture
def store():
    return FakeTenantStore()


@pytest.fixture
def core_api():
    return FakeCoreApi()


@pytest.fixture
def recorder():
    return FakeRecorder()


@pytest.fixture
def reconciler(store, core_api, recorder, operator_settings):
    return TenantReconciler(
        store=store,
        provisioner=NamespaceProvisioner(api=core_api),
        recorder=recorder,
        settings=operator_settings,
    )
