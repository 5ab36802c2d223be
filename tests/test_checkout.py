"""Tests for sale finalization."""

import pytest

from store_manager.domain.orders import ReceiptPayload
from store_manager.errors import EmptyCartError, SessionNotFoundError
from store_manager.services.checkout import BILL_TO_PRINT_KEY, PRINT_VIEW_PATH
from store_manager.services.storage import InMemoryStorage
from tests.conftest import PosFixture, build_pos


def _session_with_items(pos: PosFixture):  # type: ignore[no-untyped-def]
    pos.catalog.add("8964000111", "Milk 1L", 250.0)
    pos.catalog.add("8964000222", "Eggs 12", 420.5)
    session_id = pos.registry.start_session("Ali")
    for code in ("8964000111", "8964000222", "8964000111"):
        pos.manager.process_barcode(code)
    return session_id


def test_complete_sale_persists_order_and_ends_session(pos: PosFixture) -> None:
    session_id = _session_with_items(pos)

    receipt = pos.finalizer.complete_sale(session_id)

    assert len(pos.orders.orders) == 1
    order = pos.orders.orders[0]
    assert order.customer_name == "Ali"
    assert order.total == 920.5
    assert [(line.name, line.quantity) for line in order.items] == [
        ("Milk 1L", 2),
        ("Eggs 12", 1),
    ]
    assert receipt.order == order
    assert receipt.print_path == PRINT_VIEW_PATH
    assert pos.registry.find(session_id) is None


def test_complete_sale_records_activity(pos: PosFixture) -> None:
    session_id = _session_with_items(pos)

    pos.finalizer.complete_sale(session_id)

    assert pos.activity.events == [
        {
            "action": "POS Sale",
            "details": "Sold 3 item(s) to Ali for PKR 920.50 (order ORD001)",
            "user_agent": "store-manager",
        }
    ]


def test_complete_sale_stages_receipt(pos: PosFixture) -> None:
    session_id = _session_with_items(pos)

    pos.finalizer.complete_sale(session_id)

    staged = ReceiptPayload.model_validate(pos.storage.get(BILL_TO_PRINT_KEY))
    assert staged.order_id == "ORD001"
    assert staged.customer.name == "Ali"
    assert staged.customer.id == str(session_id)
    assert [item.quantity for item in staged.items] == [2, 1]
    assert staged.total == 920.5


def test_order_failure_leaves_session_untouched(pos: PosFixture) -> None:
    session_id = _session_with_items(pos)
    pos.orders.fail = True

    with pytest.raises(RuntimeError):
        pos.finalizer.complete_sale(session_id)

    assert pos.registry.active_id == session_id
    assert len(pos.registry.get(session_id).lines) == 2
    assert pos.activity.events == []
    assert pos.storage.get(BILL_TO_PRINT_KEY) is None


def test_activity_failure_still_completes_sale(pos: PosFixture) -> None:
    session_id = _session_with_items(pos)
    pos.activity.fail = True

    receipt = pos.finalizer.complete_sale(session_id)

    assert receipt.order.id == "ORD001"
    assert pos.registry.find(session_id) is None
    assert pos.storage.get(BILL_TO_PRINT_KEY) is not None


def test_empty_cart_is_rejected(pos: PosFixture) -> None:
    session_id = pos.registry.start_session("Ali")

    with pytest.raises(EmptyCartError):
        pos.finalizer.complete_sale(session_id)

    assert pos.orders.orders == []
    assert pos.registry.find(session_id) is not None


def test_completing_one_session_leaves_others(pos: PosFixture) -> None:
    pos.catalog.add("8964000111", "Milk 1L", 250.0)
    first = pos.registry.start_session("Ali")
    pos.manager.process_barcode("8964000111")
    second = pos.registry.start_session("Sara")
    pos.manager.process_barcode("8964000111")

    pos.finalizer.complete_sale(second)

    assert pos.registry.active_id == first
    assert pos.registry.get(first).lines[0].quantity == 1


def test_total_matches_line_sums(pos: PosFixture) -> None:
    pos.catalog.add("11111111", "Soap", 10.0)
    pos.catalog.add("22222222", "Candle", 5.0)
    session_id = pos.registry.start_session("Ali")
    for code in ("11111111", "11111111", "22222222"):
        pos.manager.process_barcode(code)

    receipt = pos.finalizer.complete_sale(session_id)

    assert receipt.order.total == 25.0
    assert len(pos.orders.orders) == 1
    assert len(receipt.order.items) == 2
    assert pos.registry.list_sessions() == []


class _BillStagingFails(InMemoryStorage):
    def set(self, key: str, value: object) -> None:
        if key == BILL_TO_PRINT_KEY:
            raise OSError("disk full")
        super().set(key, value)


def test_staging_failure_after_order_does_not_duplicate_it() -> None:
    pos = build_pos(_BillStagingFails())
    session_id = _session_with_items(pos)

    result = pos.manager.complete_sale(session_id)

    assert result.notice.title == "Sale completed"
    assert result.receipt is not None
    assert len(pos.orders.orders) == 1
    assert pos.registry.find(session_id) is None
    with pytest.raises(SessionNotFoundError):
        pos.manager.complete_sale(session_id)
    assert len(pos.orders.orders) == 1
