# tests/unit/services/test_stock_service.py
import pytest
from unittest.mock import AsyncMock

from stockroom.core.enums import NotificationStatus, ReplenishmentState, StockErrorKind
from stockroom.core.exceptions import (
    ValidationError,
    NotFoundError,
    ConflictError,
    InternalError,
    StockEntryNotFoundError,
    NotificationNotFoundError,
)
from stockroom.schemas.stock import StockEntryRead, ReplenishmentNotificationRead
from stockroom.services.stock_service import StockService


async def _create(service, **overrides):
    data = {
        "product_id": 1,
        "color": "red",
        "size": "M",
        "quantity": 10,
        "reorder_threshold": 5,
    }
    data.update(overrides)
    return await service.create_stock(**data)


def _open_notifications(repository, stock_id):
    return [
        n for n in repository.notifications.values()
        if n.stock_id == stock_id and n.status == NotificationStatus.OPEN.value
    ]


# --- create_stock ---

@pytest.mark.asyncio
async def test_create_stock_returns_entry_matching_inputs(stock_service, sample_stock_data):
    entry = await stock_service.create_stock(**sample_stock_data)

    assert isinstance(entry, StockEntryRead)
    assert entry.id == 1
    assert entry.product_id == 1
    assert entry.color == "red"
    assert entry.size == "M"
    assert entry.quantity == 10
    assert entry.reorder_threshold == 5
    assert entry.created_at is not None


@pytest.mark.asyncio
async def test_create_stock_ids_are_unique(stock_service):
    ids = [(await _create(stock_service, size=size)).id for size in ("S", "M", "L", "XL")]
    assert len(set(ids)) == 4


@pytest.mark.asyncio
async def test_create_stock_commits(stock_service, stock_repository, sample_stock_data):
    await stock_service.create_stock(**sample_stock_data)
    assert stock_repository.commits == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("field, value", [
    ("quantity", -1),
    ("reorder_threshold", -3),
    ("quantity", 2.5),
    ("reorder_threshold", "5"),
    ("quantity", True),
])
async def test_create_stock_rejects_bad_numbers(stock_service, stock_repository, field, value):
    with pytest.raises(ValidationError):
        await _create(stock_service, **{field: value})
    assert stock_repository.entries == {}


@pytest.mark.asyncio
async def test_create_stock_accepts_zero_quantity_and_threshold(stock_service):
    entry = await _create(stock_service, quantity=0, reorder_threshold=0)
    assert entry.quantity == 0
    assert entry.reorder_threshold == 0


@pytest.mark.asyncio
async def test_create_stock_below_threshold_does_not_notify_by_default(stock_service, stock_repository):
    entry = await _create(stock_service, quantity=2, reorder_threshold=5)
    assert _open_notifications(stock_repository, entry.id) == []
    assert await stock_service.get_replenishment_state(entry.id) == ReplenishmentState.BELOW_THRESHOLD_NO_NOTICE


@pytest.mark.asyncio
async def test_create_stock_with_check_on_create_notifies(stock_repository):
    service = StockService(stock_repository, check_on_create=True)
    entry = await _create(service, quantity=2, reorder_threshold=5)
    assert len(_open_notifications(stock_repository, entry.id)) == 1


@pytest.mark.asyncio
async def test_create_stock_storage_failure_raises_internal_error(stock_service, stock_repository):
    stock_repository.should_fail = True
    with pytest.raises(InternalError) as exc_info:
        await _create(stock_service)
    assert exc_info.value.error_kind == StockErrorKind.INTERNAL
    assert stock_repository.rollbacks == 1


# --- update_stock_entry ---

@pytest.mark.asyncio
async def test_update_stock_entry_replaces_quantity(stock_service):
    entry = await _create(stock_service, quantity=10)
    updated = await stock_service.update_stock_entry(entry.id, 3)
    assert updated.quantity == 3

    updated = await stock_service.update_stock_entry(entry.id, 7)
    assert updated.quantity == 7  # replaced, not 3 + 7


@pytest.mark.asyncio
async def test_update_stock_entry_negative_leaves_quantity_unchanged(stock_service):
    entry = await _create(stock_service, quantity=10)
    with pytest.raises(ValidationError) as exc_info:
        await stock_service.update_stock_entry(entry.id, -1)

    assert exc_info.value.error_kind == StockErrorKind.VALIDATION
    details = await stock_service.get_stock_entry_details(entry.id)
    assert details.quantity == 10


@pytest.mark.asyncio
async def test_update_stock_entry_unknown_id(stock_service):
    with pytest.raises(StockEntryNotFoundError) as exc_info:
        await stock_service.update_stock_entry(999, 5)
    assert isinstance(exc_info.value, NotFoundError)
    assert exc_info.value.error_kind == StockErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_update_stock_entry_does_not_check_threshold(stock_service, stock_repository):
    entry = await _create(stock_service)
    await stock_service.update_stock_entry(entry.id, 1)
    assert _open_notifications(stock_repository, entry.id) == []


@pytest.mark.asyncio
async def test_update_stock_entry_storage_failure_restores_quantity(stock_service, stock_repository):
    entry = await _create(stock_service, quantity=10)
    stock_repository.should_fail = True

    with pytest.raises(InternalError):
        await stock_service.update_stock_entry(entry.id, 4)

    assert stock_repository.entries[entry.id].quantity == 10
    assert stock_repository.rollbacks == 1


# --- adjust_stock_quantity ---

@pytest.mark.asyncio
async def test_adjust_stock_quantity_applies_delta(stock_service):
    entry = await _create(stock_service, quantity=10)
    assert (await stock_service.adjust_stock_quantity(entry.id, -4)).quantity == 6
    assert (await stock_service.adjust_stock_quantity(entry.id, 5)).quantity == 11


@pytest.mark.asyncio
async def test_adjust_stock_quantity_to_exactly_zero(stock_service):
    entry = await _create(stock_service, quantity=3)
    assert (await stock_service.adjust_stock_quantity(entry.id, -3)).quantity == 0


@pytest.mark.asyncio
async def test_adjust_stock_quantity_overdraw_is_conflict(stock_service):
    entry = await _create(stock_service, quantity=3)
    with pytest.raises(ConflictError) as exc_info:
        await stock_service.adjust_stock_quantity(entry.id, -4)

    assert exc_info.value.error_kind == StockErrorKind.CONFLICT
    assert (await stock_service.get_stock_entry_details(entry.id)).quantity == 3


@pytest.mark.asyncio
async def test_adjust_stock_quantity_rejects_non_integer_delta(stock_service):
    entry = await _create(stock_service)
    with pytest.raises(ValidationError):
        await stock_service.adjust_stock_quantity(entry.id, 1.5)


# --- check_reorder_threshold ---

@pytest.mark.asyncio
@pytest.mark.parametrize("calls", [1, 2, 10])
async def test_check_reorder_threshold_is_idempotent(stock_service, stock_repository, calls):
    entry = await _create(stock_service, quantity=10, reorder_threshold=5)
    await stock_service.update_stock_entry(entry.id, 4)

    for _ in range(calls):
        await stock_service.check_reorder_threshold(entry.id)

    open_notifications = _open_notifications(stock_repository, entry.id)
    assert len(open_notifications) == 1
    assert open_notifications[0].quantity_at_creation == 4
    assert open_notifications[0].threshold_at_creation == 5


@pytest.mark.asyncio
async def test_check_reorder_threshold_at_exact_threshold(stock_service, stock_repository):
    entry = await _create(stock_service, quantity=10, reorder_threshold=5)
    await stock_service.update_stock_entry(entry.id, 5)
    await stock_service.check_reorder_threshold(entry.id)
    assert len(_open_notifications(stock_repository, entry.id)) == 1


@pytest.mark.asyncio
async def test_check_reorder_threshold_above_threshold_does_nothing(stock_service, stock_repository):
    entry = await _create(stock_service, quantity=10, reorder_threshold=5)
    await stock_service.update_stock_entry(entry.id, 6)
    await stock_service.check_reorder_threshold(entry.id)
    assert stock_repository.notifications == {}


@pytest.mark.asyncio
async def test_check_reorder_threshold_unknown_id(stock_service):
    with pytest.raises(StockEntryNotFoundError):
        await stock_service.check_reorder_threshold(42)


@pytest.mark.asyncio
async def test_check_reorder_threshold_sends_one_alert(stock_repository):
    notifier = AsyncMock()
    service = StockService(stock_repository, notifier=notifier)
    entry = await _create(service, quantity=10, reorder_threshold=5)
    await service.update_stock_entry(entry.id, 1)

    await service.check_reorder_threshold(entry.id)
    await service.check_reorder_threshold(entry.id)

    notifier.send_replenishment_alert.assert_awaited_once()
    kwargs = notifier.send_replenishment_alert.await_args.kwargs
    assert kwargs["entry"].id == entry.id
    assert kwargs["notification"].stock_id == entry.id


@pytest.mark.asyncio
async def test_check_reorder_threshold_storage_failure(stock_service, stock_repository):
    entry = await _create(stock_service, quantity=1, reorder_threshold=5)
    stock_repository.should_fail = True
    with pytest.raises(InternalError):
        await stock_service.check_reorder_threshold(entry.id)
    assert stock_repository.notifications == {}


@pytest.mark.asyncio
async def test_replenishment_state_machine(stock_service, stock_repository):
    entry = await _create(stock_service, quantity=10, reorder_threshold=5)
    assert await stock_service.get_replenishment_state(entry.id) == ReplenishmentState.ABOVE_THRESHOLD

    await stock_service.update_stock_entry(entry.id, 4)
    assert await stock_service.get_replenishment_state(entry.id) == ReplenishmentState.BELOW_THRESHOLD_NO_NOTICE

    await stock_service.check_reorder_threshold(entry.id)
    assert await stock_service.get_replenishment_state(entry.id) == ReplenishmentState.BELOW_THRESHOLD_NOTIFIED

    # Restocking leaves the OPEN notification in place
    await stock_service.update_stock_entry(entry.id, 20)
    assert await stock_service.get_replenishment_state(entry.id) == ReplenishmentState.ABOVE_THRESHOLD
    assert len(_open_notifications(stock_repository, entry.id)) == 1


@pytest.mark.asyncio
async def test_new_notification_after_dismissal(stock_service, stock_repository):
    entry = await _create(stock_service, quantity=1, reorder_threshold=5)
    await stock_service.check_reorder_threshold(entry.id)
    first = _open_notifications(stock_repository, entry.id)[0]

    await stock_service.delete_replenishment_notification(first.id)
    await stock_service.check_reorder_threshold(entry.id)

    notifications = await stock_service.get_all_replenishment_notifications(entry.id)
    assert [n.status for n in notifications].count(NotificationStatus.OPEN) == 1
    assert [n.status for n in notifications].count(NotificationStatus.DISMISSED) == 1


# --- listing ---

@pytest.mark.asyncio
async def test_list_below_threshold_is_exact(stock_service):
    levels = [(10, 5), (5, 5), (0, 0), (1, 0), (3, 7), (8, 2)]
    for quantity, threshold in levels:
        await _create(stock_service, quantity=quantity, reorder_threshold=threshold)

    below = await stock_service.list_stock_entries_below_reorder_threshold()

    expected_ids = [i + 1 for i, (q, t) in enumerate(levels) if q <= t]
    assert [e.id for e in below] == expected_ids


@pytest.mark.asyncio
async def test_list_below_threshold_empty(stock_service):
    await _create(stock_service, quantity=10, reorder_threshold=5)
    assert await stock_service.list_stock_entries_below_reorder_threshold() == []


@pytest.mark.asyncio
async def test_list_stock_entries_filters_by_product(stock_service):
    await _create(stock_service, product_id=1)
    await _create(stock_service, product_id=2)
    await _create(stock_service, product_id=1, size="L")

    assert len(await stock_service.list_stock_entries()) == 3
    assert [e.id for e in await stock_service.list_stock_entries(product_id=1)] == [1, 3]


# --- notifications ---

@pytest.mark.asyncio
async def test_get_all_replenishment_notifications_most_recent_first(stock_service):
    entry = await _create(stock_service, quantity=1, reorder_threshold=5)
    await stock_service.check_reorder_threshold(entry.id)
    first = (await stock_service.get_all_replenishment_notifications(entry.id))[0]
    await stock_service.delete_replenishment_notification(first.id)
    await stock_service.check_reorder_threshold(entry.id)

    notifications = await stock_service.get_all_replenishment_notifications(entry.id)

    assert all(isinstance(n, ReplenishmentNotificationRead) for n in notifications)
    assert [n.id for n in notifications] == [2, 1]


@pytest.mark.asyncio
async def test_get_all_replenishment_notifications_unknown_stock(stock_service):
    assert await stock_service.get_all_replenishment_notifications(999) == []


@pytest.mark.asyncio
async def test_delete_replenishment_notification_dismisses(stock_service):
    entry = await _create(stock_service, quantity=1, reorder_threshold=5)
    await stock_service.check_reorder_threshold(entry.id)
    notification = (await stock_service.get_all_replenishment_notifications(entry.id))[0]

    result = await stock_service.delete_replenishment_notification(notification.id)

    assert result.status == NotificationStatus.DISMISSED
    assert result.dismissed_at is not None
    listed = await stock_service.get_all_replenishment_notifications(entry.id)
    assert [n.status for n in listed] == [NotificationStatus.DISMISSED]


@pytest.mark.asyncio
async def test_delete_replenishment_notification_twice_is_noop(stock_service, stock_repository):
    entry = await _create(stock_service, quantity=1, reorder_threshold=5)
    await stock_service.check_reorder_threshold(entry.id)

    first = await stock_service.delete_replenishment_notification(1)
    commits = stock_repository.commits
    second = await stock_service.delete_replenishment_notification(1)

    assert second.dismissed_at == first.dismissed_at
    assert stock_repository.commits == commits


@pytest.mark.asyncio
async def test_delete_replenishment_notification_storage_failure_keeps_it_open(stock_service, stock_repository):
    entry = await _create(stock_service, quantity=1, reorder_threshold=5)
    await stock_service.check_reorder_threshold(entry.id)
    stock_repository.should_fail = True

    with pytest.raises(InternalError):
        await stock_service.delete_replenishment_notification(1)

    notification = stock_repository.notifications[1]
    assert notification.status == NotificationStatus.OPEN.value
    assert notification.dismissed_at is None
    assert stock_repository.rollbacks == 1


@pytest.mark.asyncio
async def test_delete_replenishment_notification_unknown_id(stock_service):
    with pytest.raises(NotificationNotFoundError) as exc_info:
        await stock_service.delete_replenishment_notification(123)
    assert exc_info.value.error_kind == StockErrorKind.NOT_FOUND


# --- details / delete entry ---

@pytest.mark.asyncio
async def test_get_stock_entry_details_unknown_returns_none(stock_service):
    assert await stock_service.get_stock_entry_details(999) is None


@pytest.mark.asyncio
async def test_delete_stock_entry_cascades_notifications(stock_service, stock_repository):
    entry = await _create(stock_service, quantity=1, reorder_threshold=5)
    await stock_service.check_reorder_threshold(entry.id)

    deleted = await stock_service.delete_stock_entry(entry.id)

    assert deleted.id == entry.id
    assert await stock_service.get_stock_entry_details(entry.id) is None
    assert await stock_service.get_all_replenishment_notifications(entry.id) == []


@pytest.mark.asyncio
async def test_delete_stock_entry_unknown_id(stock_service):
    with pytest.raises(StockEntryNotFoundError):
        await stock_service.delete_stock_entry(5)


# --- sweep ---

@pytest.mark.asyncio
async def test_sweep_reorder_thresholds_counts_new_notifications(stock_service, stock_repository):
    low = await _create(stock_service, quantity=1, reorder_threshold=5)
    await _create(stock_service, quantity=9, reorder_threshold=5)
    already = await _create(stock_service, quantity=0, reorder_threshold=2)
    await stock_service.check_reorder_threshold(already.id)

    assert await stock_service.sweep_reorder_thresholds() == 1
    assert len(_open_notifications(stock_repository, low.id)) == 1
    assert await stock_service.sweep_reorder_thresholds() == 0


# --- example scenario ---

@pytest.mark.asyncio
async def test_red_medium_restock_scenario(stock_service):
    entry = await stock_service.create_stock(1, "red", "M", 10, 5)
    await stock_service.update_stock_entry(entry.id, 4)
    await stock_service.check_reorder_threshold(entry.id)

    below = await stock_service.list_stock_entries_below_reorder_threshold()
    assert entry.id in [e.id for e in below]

    notifications = await stock_service.get_all_replenishment_notifications(entry.id)
    assert len(notifications) == 1
    assert notifications[0].status == NotificationStatus.OPEN
