
import pytest

from modules.orders.constants import OrderSource
from modules.orders.dtos import CartItemDTO, CreateOrderDTO
from modules.orders.views import build_order_service
from modules.payments.models import Payment
from modules.payments.signature import compute_signature


@pytest.fixture()
def order_service():
    return build_order_service()


@pytest.fixture()
def place_order(order_service, matcha_latte):
    """Place an order straight through the service layer."""

    def _place(user=None, quantity=2, customer_name="Budi", **overrides):
        dto = CreateOrderDTO(
            items=[CartItemDTO(product_id=matcha_latte.id, quantity=quantity)],
            source=OrderSource.MEMBER if user else OrderSource.GUEST,
            user_id=user.id if user else None,
            customer_name=None if user else customer_name,
            **overrides,
        )
        return order_service.create_order(dto)

    return _place


@pytest.fixture()
def guest_order(place_order):
    return place_order()


@pytest.fixture()
def member_order(place_order, member_user):
    return place_order(user=member_user)


@pytest.fixture()
def payment(guest_order):
    return Payment.objects.create(
        order=guest_order,
        gateway_order_id=f"{guest_order.order_number}-1736200000-ab12",
        gross_amount=guest_order.total,
    )


@pytest.fixture()
def notification_for(settings):
    """Build a correctly signed gateway notification body."""

    def _build(payment, transaction_status="settlement", gross_amount=None, **extra):
        gross = gross_amount if gross_amount is not None else f"{payment.gross_amount:.2f}"
        status_code = "200" if transaction_status == "settlement" else "201"
        body = {
            "order_id": payment.gateway_order_id,
            "status_code": status_code,
            "gross_amount": gross,
            "signature_key": compute_signature(
                payment.gateway_order_id, status_code, gross, settings.MIDTRANS_SERVER_KEY
            ),
            "transaction_status": transaction_status,
            "transaction_id": "9aed5972-5b6a-401e-894b-a32c91ed1a3a",
            "transaction_time": "2025-01-07 10:00:00",
            "payment_type": "qris",
            "fraud_status": "accept",
            "status_message": "midtrans payment notification",
            "merchant_id": "G141532850",
            "currency": "IDR",
        }
        body.update(extra)
        return body

    return _build
