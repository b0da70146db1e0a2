"""Unit tests for PaymentService with mocked collaborators."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from modules.orders.constants import OrderSource, OrderStatus
from modules.orders.exceptions import InvalidStatusTransition, OrderNotFound
from modules.orders.models import Order
from modules.payments.constants import TransactionStatus
from modules.payments.dtos import PaymentNotificationDTO, SnapTransactionDTO
from modules.payments.events import PaymentFailed, PaymentSettled
from modules.payments.exceptions import (
    GatewayError,
    InvalidAmount,
    InvalidSignature,
    OrderNotPending,
    PaymentAlreadyExists,
    PaymentNotFound,
)
from modules.payments.models import Payment
from modules.payments.services import PaymentService, parse_gateway_time
from modules.payments.signature import compute_signature

pytestmark = pytest.mark.unit

SERVER_KEY = "unit-test-server-key"
GATEWAY_ORDER_ID = "MC-250107-001-1736200000-ab12"


def _order(status=OrderStatus.PENDING) -> Order:
    return Order(
        id=uuid.uuid4(),
        order_number="MC-250107-001",
        status=status,
        customer_name="Budi",
        source=OrderSource.GUEST,
        subtotal=Decimal("90000.00"),
        tax=Decimal("9000.00"),
        total=Decimal("99000.00"),
    )


def _payment(status="") -> Payment:
    return Payment(
        id=uuid.uuid4(),
        order_id=uuid.uuid4(),
        gateway_order_id=GATEWAY_ORDER_ID,
        gross_amount=Decimal("99000.00"),
        transaction_status=status,
    )


def _notification(
    transaction_status="settlement",
    gross_amount="99000.00",
    status_code="200",
    signature=None,
    **extra,
) -> PaymentNotificationDTO:
    if signature is None:
        signature = compute_signature(GATEWAY_ORDER_ID, status_code, gross_amount, SERVER_KEY)
    data = {
        "order_id": GATEWAY_ORDER_ID,
        "status_code": status_code,
        "gross_amount": gross_amount,
        "signature_key": signature,
        "transaction_status": transaction_status,
        "transaction_id": "tx-1",
        "transaction_time": "2025-01-07 10:00:00",
        "payment_type": "qris",
        "fraud_status": "accept",
    }
    data.update(extra)
    return PaymentNotificationDTO(**data)


@pytest.fixture()
def payment_repo():
    repo = MagicMock()
    repo.list_for_order.return_value = []
    return repo


@pytest.fixture()
def order_repo():
    return MagicMock()


@pytest.fixture()
def order_service():
    return MagicMock()


@pytest.fixture()
def gateway():
    gateway = MagicMock()
    gateway.create_transaction.return_value = SnapTransactionDTO(
        token="snap-token", redirect_url="https://pay.example/snap-token"
    )
    return gateway


@pytest.fixture()
def service(payment_repo, order_repo, order_service, gateway):
    return PaymentService(
        payment_repository=payment_repo,
        order_repository=order_repo,
        order_service=order_service,
        gateway=gateway,
        server_key=SERVER_KEY,
        clock=lambda: 1736200000.5,
    )


class TestCreatePaymentToken:
    def test_opens_transaction_then_records_attempt(
        self, service, order_repo, payment_repo, gateway
    ):
        order = _order()
        order_repo.get_by_id.return_value = order
        payment_repo.create.side_effect = lambda data: Payment(id=uuid.uuid4(), **data)

        result = service.create_payment_token(order.id)

        gateway_order_id = gateway.create_transaction.call_args.args[1]
        assert gateway_order_id.startswith("MC-250107-001-1736200000-")
        assert len(gateway_order_id.rsplit("-", 1)[-1]) == 4
        data = payment_repo.create.call_args.args[0]
        assert data["gateway_order_id"] == gateway_order_id
        assert data["gross_amount"] == Decimal("99000.00")
        assert result.token == "snap-token"
        assert result.redirect_url == "https://pay.example/snap-token"

    def test_gateway_ids_differ_between_attempts(
        self, service, order_repo, payment_repo, gateway
    ):
        order_repo.get_by_id.return_value = _order()
        payment_repo.create.side_effect = lambda data: Payment(id=uuid.uuid4(), **data)

        service.create_payment_token(uuid.uuid4())
        service.create_payment_token(uuid.uuid4())

        first, second = (c.args[1] for c in gateway.create_transaction.call_args_list)
        assert first != second

    def test_missing_order(self, service, order_repo):
        order_repo.get_by_id.return_value = None
        with pytest.raises(OrderNotFound):
            service.create_payment_token(uuid.uuid4())

    def test_order_must_be_pending(self, service, order_repo, gateway):
        order_repo.get_by_id.return_value = _order(OrderStatus.PREPARING)

        with pytest.raises(OrderNotPending):
            service.create_payment_token(uuid.uuid4())
        gateway.create_transaction.assert_not_called()

    def test_settled_attempt_blocks_new_token(self, service, order_repo, payment_repo):
        order_repo.get_by_id.return_value = _order()
        payment_repo.list_for_order.return_value = [
            _payment(TransactionStatus.EXPIRE),
            _payment(TransactionStatus.SETTLEMENT),
        ]

        with pytest.raises(PaymentAlreadyExists):
            service.create_payment_token(uuid.uuid4())

    def test_gateway_failure_records_nothing(self, service, order_repo, payment_repo, gateway):
        order_repo.get_by_id.return_value = _order()
        gateway.create_transaction.side_effect = GatewayError("down")

        with pytest.raises(GatewayError):
            service.create_payment_token(uuid.uuid4())
        payment_repo.create.assert_not_called()


class TestWebhookRejections:
    def test_bad_signature_changes_nothing(self, service, payment_repo, order_service):
        with pytest.raises(InvalidSignature):
            service.process_webhook_notification(_notification(signature="0" * 128))

        payment_repo.get_by_gateway_order_id.assert_not_called()
        payment_repo.save.assert_not_called()
        order_service.update_status.assert_not_called()

    def test_unknown_payment(self, service, payment_repo):
        payment_repo.get_by_gateway_order_id.return_value = None

        with pytest.raises(PaymentNotFound):
            service.process_webhook_notification(_notification())

    @pytest.mark.parametrize("gross_amount", ["98000.00", "99000.01", "abc", "NaN"])
    def test_amount_must_match_exactly(
        self, service, payment_repo, order_service, gross_amount
    ):
        payment_repo.get_by_gateway_order_id.return_value = _payment()

        with pytest.raises(InvalidAmount):
            service.process_webhook_notification(_notification(gross_amount=gross_amount))

        payment_repo.save.assert_not_called()
        order_service.update_status.assert_not_called()

    def test_amount_without_decimals_matches(self, service, payment_repo):
        payment_repo.get_by_gateway_order_id.return_value = _payment()

        service.process_webhook_notification(_notification(gross_amount="99000"))

        payment_repo.save.assert_called_once()


class TestWebhookReconciliation:
    def test_settlement_moves_order_to_preparing(
        self, service, payment_repo, order_service
    ):
        payment = _payment()
        payment_repo.get_by_gateway_order_id.return_value = payment

        result = service.process_webhook_notification(
            _notification(settlement_time="2025-01-07 10:01:00", vendor_field="x")
        )

        assert result is payment
        assert payment.transaction_status == TransactionStatus.SETTLEMENT
        assert payment.transaction_id == "tx-1"
        assert payment.payment_type == "qris"
        assert payment.settlement_time is not None
        assert payment.payment_metadata["vendor_field"] == "x"
        payment_repo.save.assert_called_once_with(payment)
        order_service.update_status.assert_called_once_with(
            payment.order_id,
            OrderStatus.PREPARING,
            notes="Payment settlement",
            allow_same_status=True,
        )
        assert isinstance(payment.domain_events[0], PaymentSettled)

    @pytest.mark.parametrize("transaction_status", ["expire", "cancel", "deny"])
    def test_failed_payment_cancels_order(
        self, service, payment_repo, order_service, transaction_status
    ):
        payment = _payment()
        payment_repo.get_by_gateway_order_id.return_value = payment

        service.process_webhook_notification(
            _notification(transaction_status=transaction_status, status_code="202")
        )

        target = order_service.update_status.call_args.args[1]
        assert target == OrderStatus.CANCELLED
        assert isinstance(payment.domain_events[0], PaymentFailed)

    @pytest.mark.parametrize("transaction_status", ["pending", "refund", "capture"])
    def test_other_statuses_leave_order_alone(
        self, service, payment_repo, order_service, transaction_status
    ):
        payment = _payment()
        payment_repo.get_by_gateway_order_id.return_value = payment

        service.process_webhook_notification(
            _notification(transaction_status=transaction_status, status_code="201")
        )

        payment_repo.save.assert_called_once_with(payment)
        assert payment.transaction_status == transaction_status
        order_service.update_status.assert_not_called()

    @pytest.mark.parametrize("error", [OrderNotFound("gone"), InvalidStatusTransition("no")])
    def test_payment_saved_before_order_failure_propagates(
        self, service, payment_repo, order_service, error
    ):
        payment = _payment()
        payment_repo.get_by_gateway_order_id.return_value = payment
        order_service.update_status.side_effect = error

        with pytest.raises(type(error)):
            service.process_webhook_notification(_notification())

        payment_repo.save.assert_called_once_with(payment)
        assert payment.transaction_status == TransactionStatus.SETTLEMENT

    def test_redelivery_raises_no_new_event(self, service, payment_repo):
        payment = _payment(TransactionStatus.SETTLEMENT)
        payment_repo.get_by_gateway_order_id.return_value = payment

        service.process_webhook_notification(_notification())

        assert payment.domain_events == []

    def test_missing_transaction_time_defaults_to_now(self, service, payment_repo):
        payment = _payment()
        payment_repo.get_by_gateway_order_id.return_value = payment

        service.process_webhook_notification(_notification(transaction_time=""))

        assert payment.transaction_time is not None

    def test_unreadable_settlement_time_keeps_previous(self, service, payment_repo):
        payment = _payment()
        previous = parse_gateway_time("2025-01-07 09:00:00")
        payment.settlement_time = previous
        payment_repo.get_by_gateway_order_id.return_value = payment

        service.process_webhook_notification(_notification(settlement_time="yesterday"))

        assert payment.settlement_time == previous


class TestParseGatewayTime:
    def test_parses_local_time(self):
        parsed = parse_gateway_time("2025-01-07 10:00:00")
        assert parsed is not None
        assert parsed.tzinfo is not None
        assert parsed.replace(tzinfo=None) == datetime(2025, 1, 7, 10, 0, 0)

    @pytest.mark.parametrize("value", [None, "", "07/01/2025"])
    def test_unreadable_values(self, value):
        assert parse_gateway_time(value) is None
