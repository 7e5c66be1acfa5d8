"""Task 查询投影单元测试

测试内容：
1. 利润计算（缺失值按 0，数量缺省按 1）
2. 展示编号
3. 视图 join 负责人/活动/成本中心
"""

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from eventops.core.exceptions import PersistenceError, RecordNotFoundError
from eventops.core.models import FulfillmentEdits, ProfitabilityEdits, Task, TaskDraft, TaskStatus
from eventops.core.projection import (
    TaskQuery,
    compute_profitability,
    fulfillment_visible,
    serial_number,
)


def make_task(**fields) -> Task:
    return Task(id="01jabcdef", title="Catering", created_at=datetime.now(UTC), **fields)


class TestProfitability:
    def test_net_profit(self):
        task = make_task(
            cost_to_client=Decimal("100"),
            actual_cost=Decimal("40"),
            billable_quantity=Decimal("3"),
        )
        result = compute_profitability(task)
        assert result.profit_per_unit == Decimal("60")
        assert result.net_profit == Decimal("180")

    def test_quantity_defaults_to_one(self):
        task = make_task(cost_to_client=Decimal("100"), actual_cost=Decimal("40"))
        assert compute_profitability(task).net_profit == Decimal("60")

    def test_missing_amounts_are_zero(self):
        result = compute_profitability(make_task(actual_cost=Decimal("25")))
        assert result.profit_per_unit == Decimal("-25")
        assert result.net_profit == Decimal("-25")

    def test_all_missing(self):
        assert compute_profitability(make_task()).net_profit == Decimal("0")


class TestDisplayHelpers:
    def test_serial_from_event_initials(self):
        assert serial_number(make_task(), "Summer Gala Night") == "SG01JA"

    def test_serial_without_event(self):
        assert serial_number(make_task()) == "TS01JA"

    def test_custom_id_wins(self):
        assert serial_number(make_task(custom_id="VIP-7"), "Summer Gala") == "VIP-7"

    @pytest.mark.parametrize(
        "status,visible",
        [
            (TaskStatus.PENDING, False),
            (TaskStatus.ACKNOWLEDGED, False),
            (TaskStatus.IN_REVIEW, False),
            (TaskStatus.IN_PROGRESS, True),
            (TaskStatus.AWAITING_APPROVAL, True),
            (TaskStatus.COMPLETED, True),
        ],
    )
    def test_fulfillment_visible(self, status, visible):
        assert fulfillment_visible(status) is visible


class TestTaskQuery:
    async def test_view_joins_references(self, engine, store_group, admin, assignee, advance_to):
        await store_group.events.insert({"id": "evt-1", "name": "Winter Fair"})
        await store_group.team_members.insert(
            {"id": assignee.id, "full_name": "Eve Employee", "role": "Employee", "status": "Active"}
        )
        await store_group.cost_centers.insert({"id": "cc-1", "code": "OPS", "title": "Operations"})
        task = await engine.create_task(
            admin, TaskDraft(title="Heaters", event_id="evt-1", assignee_id=assignee.id)
        )
        await engine.save_profitability(
            task,
            admin,
            ProfitabilityEdits(cost_to_client="100", billable_quantity="3", cost_center_id="cc-1"),
        )
        task = await advance_to(task, TaskStatus.IN_PROGRESS)
        await engine.save_fulfillment(task, assignee, FulfillmentEdits(actual_cost="40"))

        view = await TaskQuery(store_group).get_task_view(task.id)

        assert view.assignee.full_name == "Eve Employee"
        assert view.event.name == "Winter Fair"
        assert view.cost_center.code == "OPS"
        assert view.serial_number == f"WF{task.id[:4].upper()}"
        assert view.profitability.net_profit == Decimal("180")
        assert view.progress.step_index == 2
        assert view.progress.fraction == 0.5
        assert view.fulfillment_visible is True

    async def test_missing_references_are_none(self, engine, store_group, admin):
        task = await engine.create_task(
            admin, TaskDraft(title="Orphan", event_id="evt-gone", assignee_id="user-gone")
        )
        view = await TaskQuery(store_group).get_task_view(task.id)
        assert view.event is None
        assert view.assignee is None
        assert view.serial_number.startswith("TS")

    async def test_missing_task(self, store_group):
        with pytest.raises(RecordNotFoundError):
            await TaskQuery(store_group).get_task_view("nope")

    async def test_reference_lookup_failure_wrapped(self, engine, store_group, admin):
        task = await engine.create_task(admin, TaskDraft(title="Banner", event_id="evt-1"))
        store_group.events.get = AsyncMock(side_effect=RuntimeError("database is locked"))
        with pytest.raises(PersistenceError, match="database is locked"):
            await TaskQuery(store_group).get_task_view(task.id)

    async def test_list_by_event_newest_first(self, engine, store_group, admin):
        first = await engine.create_task(admin, TaskDraft(title="A", event_id="evt-1"))
        await engine.create_task(admin, TaskDraft(title="B", event_id="evt-2"))
        third = await engine.create_task(admin, TaskDraft(title="C", event_id="evt-1"))

        views = await TaskQuery(store_group).list_task_views(event_id="evt-1")
        assert [v.task.id for v in views] == [third.id, first.id]

        all_views = await TaskQuery(store_group).list_task_views()
        assert len(all_views) == 3
