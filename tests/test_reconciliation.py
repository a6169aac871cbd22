from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from conftest import TEST_SECRET, WALLET_A, WALLET_B
from fakes import RecordingCallbacks, RecordingNotifier, make_transfer
from usdt_gateway.core.signing import verify_signature
from usdt_gateway.infrastructure.database.repositories import SqlOrderRepository
from usdt_gateway.infrastructure.integrations.exceptions import LedgerQueryError
from usdt_gateway.modules.orders import AllocationRequest, OrderStatus
from usdt_gateway.modules.reconciliation import LedgerTransfer

pytestmark = pytest.mark.asyncio

NOTIFY_URL = "https://shop.example.com/notify"


async def _allocate(session_factory, make_order_service, order_id: str):
    request = AllocationRequest(order_id=order_id, amount=Decimal("100"), notify_url=NOTIFY_URL)
    async with session_factory() as session:
        return await make_order_service(session).allocate(request)


async def _load(session_factory, trade_id: str):
    async with session_factory() as session:
        return await SqlOrderRepository(session).get_by_trade_id(trade_id)


def _soon() -> datetime:
    return datetime.now(timezone.utc) + timedelta(seconds=1)


async def test_matching_transfer_marks_order_paid_and_notifies(
    session_factory, make_order_service, make_reconciler, wallets, ledger, notifier, callbacks
):
    result = await _allocate(session_factory, make_order_service, "O1")
    ledger.add(make_transfer(WALLET_A, "14.2857", _soon(), tx_hash="0xabc"))

    report = await make_reconciler().reconcile_all()

    assert report.wallets_scanned == 2
    assert report.failed_wallets == []
    assert report.paid_trade_ids == [result.trade_id]

    order = await _load(session_factory, result.trade_id)
    assert order.status == OrderStatus.PAID
    assert order.ledger_tx_id == "0xabc"
    assert order.callback_confirmed is True

    assert len(notifier.messages) == 1
    assert result.trade_id in notifier.messages[0]

    assert len(callbacks.calls) == 1
    url, payload = callbacks.calls[0]
    assert url == NOTIFY_URL
    assert payload["trade_id"] == result.trade_id
    assert payload["order_id"] == "O1"
    assert payload["amount"] == 100.0
    assert payload["actual_amount"] == 14.2857
    assert payload["token"] == WALLET_A
    assert payload["block_transaction_id"] == "0xabc"
    assert payload["status"] == "paid"
    assert verify_signature(payload, payload["signature"], TEST_SECRET)


async def test_second_pass_does_not_pay_or_notify_again(
    session_factory, make_order_service, make_reconciler, wallets, ledger, notifier, callbacks
):
    await _allocate(session_factory, make_order_service, "O1")
    ledger.add(make_transfer(WALLET_A, "14.2857", _soon()))
    reconciler = make_reconciler()

    first = await reconciler.reconcile_all()
    second = await reconciler.reconcile_all()

    assert first.paid_count == 1
    assert second.paid_count == 0
    assert len(notifier.messages) == 1
    assert len(callbacks.calls) == 1


async def test_ledger_is_queried_over_trailing_window(make_reconciler, wallets, ledger):
    now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

    await make_reconciler(clock=lambda: now).reconcile_all()

    assert ledger.queries == [
        (WALLET_A, now - timedelta(hours=24), now),
        (WALLET_B, now - timedelta(hours=24), now),
    ]


async def test_transfer_before_order_creation_is_ignored(
    session_factory, make_order_service, make_reconciler, wallets, ledger, callbacks
):
    result = await _allocate(session_factory, make_order_service, "O1")
    order = await _load(session_factory, result.trade_id)
    ledger.add(make_transfer(WALLET_A, "14.2857", order.created_at - timedelta(minutes=1)))

    report = await make_reconciler().reconcile_all()

    assert report.paid_count == 0
    assert (await _load(session_factory, result.trade_id)).status == OrderStatus.PENDING
    assert callbacks.calls == []


async def test_old_transfer_does_not_pay_next_order_on_reused_slot(
    session_factory, make_order_service, make_reconciler, wallets, ledger
):
    first = await _allocate(session_factory, make_order_service, "O1")
    first_order = await _load(session_factory, first.trade_id)
    ledger.add(make_transfer(WALLET_A, "14.2857", first_order.created_at, tx_hash="0xfirst"))
    reconciler = make_reconciler()
    assert (await reconciler.reconcile_all()).paid_trade_ids == [first.trade_id]

    second = await _allocate(session_factory, make_order_service, "O2")
    assert (second.wallet_address, second.settlement_amount) == (WALLET_A, Decimal("14.2857"))

    assert (await reconciler.reconcile_all()).paid_count == 0
    assert (await _load(session_factory, second.trade_id)).status == OrderStatus.PENDING

    second_order = await _load(session_factory, second.trade_id)
    ledger.add(make_transfer(WALLET_A, "14.2857", second_order.created_at, tx_hash="0xsecond"))
    assert (await reconciler.reconcile_all()).paid_trade_ids == [second.trade_id]
    assert (await _load(session_factory, second.trade_id)).ledger_tx_id == "0xsecond"


@pytest.mark.parametrize(
    "transfer_kwargs",
    [
        {"to_address": WALLET_B},
        {"status": "FAILED"},
    ],
    ids=["wrong-recipient", "failed-transfer"],
)
async def test_non_matching_transfers_are_ignored(
    session_factory, make_order_service, make_reconciler, wallets, ledger, transfer_kwargs
):
    result = await _allocate(session_factory, make_order_service, "O1")
    ledger.transfers[WALLET_A] = [make_transfer(WALLET_A, "14.2857", _soon(), **transfer_kwargs)]

    report = await make_reconciler().reconcile_all()

    assert report.paid_count == 0
    assert (await _load(session_factory, result.trade_id)).status == OrderStatus.PENDING


async def test_amount_off_slot_grid_is_ignored(
    session_factory, make_order_service, make_reconciler, wallets, ledger
):
    result = await _allocate(session_factory, make_order_service, "O1")
    ledger.add(make_transfer(WALLET_A, "14.285712", _soon()))

    report = await make_reconciler().reconcile_all()

    assert report.paid_count == 0
    assert (await _load(session_factory, result.trade_id)).status == OrderStatus.PENDING


async def test_transfer_to_other_wallet_does_not_pay_order(
    session_factory, make_order_service, make_reconciler, wallets, ledger
):
    result = await _allocate(session_factory, make_order_service, "O1")
    ledger.add(make_transfer(WALLET_B, "14.2857", _soon()))

    report = await make_reconciler().reconcile_all()

    assert report.paid_count == 0
    assert (await _load(session_factory, result.trade_id)).status == OrderStatus.PENDING


async def test_expired_order_is_not_settled(
    session_factory, make_order_service, make_reconciler, wallets, ledger, callbacks
):
    result = await _allocate(session_factory, make_order_service, "O1")
    ledger.add(make_transfer(WALLET_A, "14.2857", _soon()))
    later = datetime.now(timezone.utc) + timedelta(minutes=11)

    report = await make_reconciler(clock=lambda: later).reconcile_all()

    assert report.paid_count == 0
    assert (await _load(session_factory, result.trade_id)).status == OrderStatus.PENDING
    assert callbacks.calls == []


async def test_late_payment_settles_expired_order_when_enabled(
    session_factory, make_order_service, make_reconciler, settings, wallets, ledger
):
    result = await _allocate(session_factory, make_order_service, "O1")
    ledger.add(make_transfer(WALLET_A, "14.2857", _soon()))
    later = datetime.now(timezone.utc) + timedelta(minutes=11)
    lenient = settings.model_copy(
        update={"gateway": settings.gateway.model_copy(update={"accept_late_payments": True})}
    )

    report = await make_reconciler(clock=lambda: later, settings=lenient).reconcile_all()

    assert report.paid_trade_ids == [result.trade_id]


async def test_failing_wallet_does_not_block_others(
    session_factory, make_order_service, make_reconciler, wallets, ledger
):
    await _allocate(session_factory, make_order_service, "O1")
    on_b = await _allocate(session_factory, make_order_service, "O2")
    assert on_b.wallet_address == WALLET_B
    ledger.failing.add(WALLET_A)
    ledger.add(make_transfer(WALLET_B, "14.2857", _soon()))

    report = await make_reconciler().reconcile_all()

    assert report.failed_wallets == [WALLET_A]
    assert report.paid_trade_ids == [on_b.trade_id]


async def test_callback_failure_keeps_order_paid(
    session_factory, make_order_service, make_reconciler, wallets, ledger
):
    result = await _allocate(session_factory, make_order_service, "O1")
    ledger.add(make_transfer(WALLET_A, "14.2857", _soon()))

    report = await make_reconciler(callbacks=RecordingCallbacks(fail=True)).reconcile_all()

    order = await _load(session_factory, result.trade_id)
    assert report.paid_trade_ids == [result.trade_id]
    assert order.status == OrderStatus.PAID
    assert order.callback_confirmed is False


async def test_unacknowledged_callback_is_not_confirmed(
    session_factory, make_order_service, make_reconciler, wallets, ledger
):
    result = await _allocate(session_factory, make_order_service, "O1")
    ledger.add(make_transfer(WALLET_A, "14.2857", _soon()))

    await make_reconciler(callbacks=RecordingCallbacks(response="fail")).reconcile_all()

    assert (await _load(session_factory, result.trade_id)).callback_confirmed is False


async def test_notifier_failure_still_sends_callback(
    session_factory, make_order_service, make_reconciler, wallets, ledger, callbacks
):
    result = await _allocate(session_factory, make_order_service, "O1")
    ledger.add(make_transfer(WALLET_A, "14.2857", _soon()))

    await make_reconciler(notifier=RecordingNotifier(fail=True)).reconcile_all()

    assert len(callbacks.calls) == 1
    assert (await _load(session_factory, result.trade_id)).callback_confirmed is True


async def test_no_wallets_means_empty_pass(make_reconciler, ledger):
    report = await make_reconciler().reconcile_all()

    assert report.wallets_scanned == 0
    assert ledger.queries == []


async def test_earliest_matching_transfer_settles_order(
    session_factory, make_order_service, make_reconciler, wallets, ledger, callbacks
):
    result = await _allocate(session_factory, make_order_service, "O1")
    now = datetime.now(timezone.utc)
    # ledger pages come newest first
    ledger.add(make_transfer(WALLET_A, "14.2857", now + timedelta(seconds=30), tx_hash="0xlate"))
    ledger.add(make_transfer(WALLET_A, "14.2857", now + timedelta(seconds=5), tx_hash="0xearly"))

    report = await make_reconciler().reconcile_all()

    assert report.paid_trade_ids == [result.trade_id]
    assert (await _load(session_factory, result.trade_id)).ledger_tx_id == "0xearly"
    assert len(callbacks.calls) == 1
    assert callbacks.calls[0][1]["block_transaction_id"] == "0xearly"


async def test_broken_transfer_does_not_stop_later_transfers_of_same_wallet(
    session_factory, make_order_service, make_reconciler, wallets, ledger
):
    result = await _allocate(session_factory, make_order_service, "O1")
    now = datetime.now(timezone.utc)
    ledger.add(
        LedgerTransfer(
            to_address=WALLET_A,
            amount_raw="not-a-number",
            status="SUCCESS",
            block_timestamp=now + timedelta(seconds=1),
            tx_hash="0xbroken",
        )
    )
    ledger.add(make_transfer(WALLET_A, "14.2857", now + timedelta(seconds=2), tx_hash="0xgood"))

    report = await make_reconciler().reconcile_all()

    assert report.failed_wallets == []
    assert report.paid_trade_ids == [result.trade_id]
    assert (await _load(session_factory, result.trade_id)).ledger_tx_id == "0xgood"


async def test_ledger_error_propagates_from_single_wallet_pass(make_reconciler, wallets, ledger):
    ledger.failing.add(WALLET_A)

    with pytest.raises(LedgerQueryError):
        await make_reconciler().reconcile_wallet(WALLET_A)

    report = await make_reconciler().reconcile_all()
    assert report.failed_wallets == [WALLET_A]
    assert report.wallets_scanned == 2
