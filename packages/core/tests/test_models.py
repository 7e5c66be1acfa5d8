"""Domain Models 单元测试

测试内容：
1. 枚举序列化/反序列化
2. Pydantic 模型校验
3. 编辑缓冲区解析（数字字符串 -> Decimal，空白 -> None）
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from eventops.core.exceptions import ValidationError
from eventops.core.models import (
    Actor,
    ActorRole,
    AttachmentContext,
    FulfillmentEdits,
    MembershipStatus,
    ProfitabilityEdits,
    Task,
    TaskPriority,
    TaskStatus,
    UploadFile,
)
from pydantic import ValidationError as PydanticValidationError


class TestEnums:
    """枚举序列化/反序列化测试"""

    def test_task_status_values(self):
        assert TaskStatus.PENDING == "Pending"
        assert TaskStatus.IN_PROGRESS == "In Progress"
        assert TaskStatus.AWAITING_APPROVAL == "Awaiting Approval"
        assert TaskStatus.IN_REVIEW == "In Review"

    def test_task_status_from_string(self):
        assert TaskStatus("Completed") == TaskStatus.COMPLETED

    def test_unknown_status_rejected(self):
        """状态只能取定义的值"""
        with pytest.raises(ValueError):
            TaskStatus("On Hold")

    def test_priority_values(self):
        assert [p.value for p in TaskPriority] == ["Low", "Medium", "High", "Urgent"]

    def test_role_and_membership_values(self):
        assert ActorRole.EMPLOYEE == "Employee"
        assert MembershipStatus.ACTIVE == "Active"
        assert AttachmentContext.SUBMISSION == "submission"


class TestTaskModel:
    """Task 模型校验"""

    def test_defaults(self):
        task = Task(id="t1", title="Book venue", created_at=datetime.now(UTC))
        assert task.status == TaskStatus.PENDING
        assert task.priority == TaskPriority.MEDIUM
        assert task.acknowledged_at is None
        assert task.status_history == []

    def test_arbitrary_status_rejected(self):
        with pytest.raises(PydanticValidationError):
            Task(id="t1", title="x", status="Whatever", created_at=datetime.now(UTC))

    def test_negative_actual_cost_rejected(self):
        with pytest.raises(PydanticValidationError):
            Task(id="t1", title="x", actual_cost=Decimal("-1"), created_at=datetime.now(UTC))

    def test_json_round_trip_keeps_decimals(self):
        task = Task(
            id="t1",
            title="x",
            created_at=datetime(2026, 1, 1, tzinfo=UTC),
            actual_cost=Decimal("40.50"),
        )
        restored = Task.model_validate(task.model_dump(mode="json"))
        assert restored.actual_cost == Decimal("40.50")

    def test_actor_default_status_active(self):
        actor = Actor(id="u1", role=ActorRole.MANAGER)
        assert actor.status == MembershipStatus.ACTIVE


class TestFulfillmentEdits:
    """履约编辑缓冲区"""

    def test_numeric_string_converted(self):
        update = FulfillmentEdits(actual_cost=" 40.5 ").to_update()
        assert update == {"actual_cost": Decimal("40.5")}

    def test_blank_values_become_none(self):
        update = FulfillmentEdits(actual_cost="", vendor_name="   ").to_update()
        assert update == {"actual_cost": None, "vendor_name": None}

    def test_only_set_fields_included(self):
        update = FulfillmentEdits(vendor_contact="+1 555 0100").to_update()
        assert update == {"vendor_contact": "+1 555 0100"}

    def test_empty_buffer(self):
        assert FulfillmentEdits().to_update() == {}

    def test_float_and_int_accepted(self):
        assert FulfillmentEdits(actual_cost=12).to_update()["actual_cost"] == Decimal("12")
        assert FulfillmentEdits(actual_cost=0.1).to_update()["actual_cost"] == Decimal("0.1")

    def test_malformed_number_names_field(self):
        with pytest.raises(ValidationError) as exc_info:
            FulfillmentEdits(actual_cost="12,5 EUR").to_update()
        assert exc_info.value.field == "actual_cost"
        assert "actual_cost" in str(exc_info.value)

    def test_negative_cost_rejected(self):
        with pytest.raises(ValidationError, match=">= 0"):
            FulfillmentEdits(actual_cost="-3").to_update()

    def test_nan_rejected(self):
        with pytest.raises(ValidationError):
            FulfillmentEdits(actual_cost="NaN").to_update()

    def test_wrong_type_rejected_at_construction(self):
        """类型错误由 pydantic 在调用方构造时抛出，不经过 to_update()"""
        with pytest.raises(PydanticValidationError):
            FulfillmentEdits(vendor_name=5)


class TestProfitabilityEdits:
    """利润编辑缓冲区"""

    def test_parses_numbers_and_text(self):
        update = ProfitabilityEdits(
            cost_to_client="100",
            billable_quantity="3",
            unit_type=" Hour ",
            cost_center_id="",
        ).to_update()
        assert update == {
            "cost_to_client": Decimal("100"),
            "billable_quantity": Decimal("3"),
            "unit_type": "Hour",
            "cost_center_id": None,
        }

    def test_malformed_quantity(self):
        with pytest.raises(ValidationError) as exc_info:
            ProfitabilityEdits(billable_quantity="three").to_update()
        assert exc_info.value.field == "billable_quantity"


class TestUploadFile:
    def test_size_and_extension(self):
        f = UploadFile(file_name="Quote.Final.PDF", content=b"%PDF", content_type="application/pdf")
        assert f.size == 4
        assert f.extension == "pdf"

    def test_missing_extension(self):
        f = UploadFile(file_name="README", content=b"", content_type="application/pdf")
        assert f.extension == "bin"
