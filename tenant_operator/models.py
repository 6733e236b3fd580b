"""
Pydantic models for the Tenant custom resource and its status conditions.

Field names follow the Kubernetes wire format (camelCase) so that objects
round-trip through the API without aliasing.
"""
from enum import Enum
from typing import List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field


class ConditionStatus(str, Enum):
    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class Condition(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    type: str
    status: ConditionStatus
    reason: str = ""
    message: str = ""
    lastTransitionTime: Optional[str] = None


class TenantSpec(BaseModel):
    """Owner-authored input. Read-only to the operator."""
    userId: str
    username: str = ""
    plan: str = ""


class TenantMeta(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    namespace: Optional[str] = None
    uid: Optional[str] = None
    resourceVersion: Optional[str] = None
    generation: Optional[int] = None
    finalizers: List[str] = Field(default_factory=list)
    deletionTimestamp: Optional[str] = None


class TenantStatus(BaseModel):
    model_config = ConfigDict(extra="ignore")

    conditions: List[Condition] = Field(default_factory=list)


class Tenant(BaseModel):
    model_config = ConfigDict(extra="ignore")

    apiVersion: str = ""
    kind: str = "Tenant"
    metadata: TenantMeta
    spec: TenantSpec
    status: TenantStatus = Field(default_factory=TenantStatus)

    @classmethod
    def from_body(cls, body: dict) -> "Tenant":
        """Parse a raw API object. A missing or null status is treated as empty."""
        data = dict(body)
        if not data.get("status"):
            data["status"] = {}
        return cls.model_validate(data)

    @property
    def key(self) -> "TenantKey":
        return TenantKey(self.metadata.namespace, self.metadata.name)

    @property
    def is_deleting(self) -> bool:
        return self.metadata.deletionTimestamp is not None

    def has_finalizer(self, token: str) -> bool:
        return token in self.metadata.finalizers

    def object_reference(self) -> dict:
        """Minimal body identifying this Tenant as the subject of an Event."""
        return {
            "apiVersion": self.apiVersion,
            "kind": self.kind,
            "metadata": {
                "name": self.metadata.name,
                "namespace": self.metadata.namespace,
                "uid": self.metadata.uid,
            },
        }


class TenantKey(NamedTuple):
    namespace: Optional[str]
    name: str

    @classmethod
    def parse(cls, key: str) -> "TenantKey":
        """Parse 'namespace/name' (or a bare cluster-scoped 'name')."""
        namespace, sep, name = key.rpartition("/")
        if not name:
            raise ValueError(f"Invalid tenant key: {key!r}")
        return cls(namespace if sep else None, name)

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}" if self.namespace else self.name
