"""Tests for the condition ledger (upsert-by-type)."""

import pytest

from tenant_operator.conditions import get_condition, set_condition, utc_now
from tenant_operator.models import Condition, ConditionStatus


class TestSetCondition:
    def test_appends_when_type_missing(self):
        conditions = []
        set_condition(conditions, "TenantReady", ConditionStatus.TRUE, "AllSubresourcesReady",
                      "All subresources are ready", now="2026-01-01T00:00:00Z")
        assert len(conditions) == 1
        c = conditions[0]
        assert c.type == "TenantReady"
        assert c.status == "True"
        assert c.reason == "AllSubresourcesReady"
        assert c.message == "All subresources are ready"
        assert c.lastTransitionTime == "2026-01-01T00:00:00Z"

    def test_overwrites_existing_entry_in_place(self):
        conditions = []
        set_condition(conditions, "A", "True", "r1", "m1", now="t1")
        set_condition(conditions, "B", "True", "r1", "m1", now="t1")
        set_condition(conditions, "A", "False", "r2", "m2", now="t2")
        assert [c.type for c in conditions] == ["A", "B"]
        assert conditions[0].status == "False"
        assert conditions[0].reason == "r2"
        assert conditions[0].message == "m2"

    def test_at_most_one_entry_per_type(self):
        conditions = []
        for i in range(5):
            set_condition(conditions, "NamespaceNotReady", "False", "NamespaceNotReady", f"attempt {i}")
        assert len(conditions) == 1
        assert conditions[0].message == "attempt 4"

    def test_accepts_plain_string_status(self):
        conditions = []
        set_condition(conditions, "A", "Unknown", "", "")
        assert conditions[0].status == ConditionStatus.UNKNOWN

    def test_rejects_invalid_status(self):
        with pytest.raises(ValueError):
            set_condition([], "A", "Maybe", "", "")

    def test_returns_the_upserted_condition(self):
        conditions = [Condition(type="A", status="True")]
        result = set_condition(conditions, "A", "False", "r", "m")
        assert result is conditions[0]


@pytest.mark.parametrize("bump_always", [False, True])
class TestTransitionTimePolicy:
    def test_status_change_always_moves_timestamp(self, bump_always):
        conditions = []
        set_condition(conditions, "A", "True", "r", "m", now="t1", bump_always=bump_always)
        set_condition(conditions, "A", "False", "r", "m", now="t2", bump_always=bump_always)
        assert conditions[0].lastTransitionTime == "t2"

    def test_unchanged_status(self, bump_always):
        conditions = []
        set_condition(conditions, "A", "True", "r", "m", now="t1", bump_always=bump_always)
        set_condition(conditions, "A", "True", "r2", "m2", now="t2", bump_always=bump_always)
        expected = "t2" if bump_always else "t1"
        assert conditions[0].lastTransitionTime == expected
        # reason/message are refreshed either way
        assert conditions[0].reason == "r2"
        assert conditions[0].message == "m2"


def test_get_condition():
    conditions = [Condition(type="A", status="True"), Condition(type="B", status="False")]
    assert get_condition(conditions, "B").status == "False"
    assert get_condition(conditions, "C") is None


def test_utc_now_format():
    now = utc_now()
    assert len(now) == 20
    assert now.endswith("Z")
    assert now[10] == "T"
