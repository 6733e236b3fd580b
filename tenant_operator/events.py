"""
Best-effort notifications about Tenants.

Events are posted through kopf's event poster (Kubernetes Events attached
to the Tenant) and, when REDIS_URL is configured, mirrored to a Redis
Stream for dashboards. Nothing here may fail a reconciliation: every
error is logged and dropped.
"""
import json as _json
import logging

import kopf

from .conditions import utc_now
from .config import Settings, settings as default_settings
from .models import Tenant

logger = logging.getLogger("tenant-operator.events")

EVENT_TYPE_NORMAL = "Normal"

REASON_NAMESPACE_READY = "NamespaceReady"
MESSAGE_NAMESPACE_READY = "Namespace Created Successfully"

STREAM_MAXLEN = 100


class EventRecorder:
    """Fire-and-forget notification sink. No ordering guarantee relative to store writes."""

    def __init__(self, settings: Settings = default_settings, redis_client=None):
        self.settings = settings
        self._redis = redis_client
        self._redis_checked = redis_client is not None

    def _get_redis(self):
        """Lazy-init Redis client. Returns None if unavailable."""
        if self._redis_checked:
            return self._redis
        self._redis_checked = True
        if not self.settings.REDIS_URL:
            return None
        try:
            import redis
            self._redis = redis.Redis.from_url(self.settings.REDIS_URL, decode_responses=True)
            self._redis.ping()
            logger.info(f"Redis connected: {self.settings.REDIS_URL}")
        except Exception as e:
            logger.warning(f"Redis unavailable (non-fatal): {e}")
            self._redis = None
        return self._redis

    def event(self, tenant: Tenant, event_type: str, reason: str, message: str):
        try:
            kopf.event(tenant.object_reference(), type=event_type, reason=reason, message=message)
        except Exception as e:
            logger.warning(f"Event post for {tenant.key} failed (non-fatal): {e}")
        self._publish(tenant, event_type, reason, message)

    def _publish(self, tenant: Tenant, event_type: str, reason: str, message: str):
        """Publish event to Redis Stream for real-time dashboard consumption."""
        r = self._get_redis()
        if not r:
            return
        entry = {
            "tenant": tenant.metadata.name,
            "userId": tenant.spec.userId,
            "type": event_type,
            "reason": reason,
            "message": message,
            "source": self.settings.EVENT_SOURCE,
            "timestamp": utc_now(),
        }
        try:
            r.xadd(f"tenant:events:{tenant.metadata.name}", entry, maxlen=STREAM_MAXLEN)
            r.publish("tenant:events", _json.dumps(entry))
        except Exception as e:
            logger.debug(f"Redis publish failed (non-fatal): {e}")

