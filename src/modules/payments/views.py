"""Payment API views.

``POST /orders/{id}/payment/`` hands out a gateway token for a pending
order. ``POST /webhooks/midtrans/`` receives gateway notifications; it has
no authentication, the notification signature is checked instead.
"""

from __future__ import annotations

from uuid import UUID

import structlog
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.responses import error_response, success_response
from modules.orders.exceptions import InvalidStatusTransition, OrderNotFound
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.views import build_order_service
from modules.payments.dtos import PaymentNotificationDTO
from modules.payments.exceptions import (
    GatewayError,
    InvalidAmount,
    InvalidSignature,
    OrderNotPending,
    PaymentAlreadyExists,
    PaymentNotFound,
)
from modules.payments.gateway import MidtransSnapGateway
from modules.payments.repositories.django_repository import PaymentDjangoRepository
from modules.payments.serializers import (
    PaymentNotificationSerializer,
    PaymentTokenSerializer,
)
from modules.payments.services import PaymentService

logger = structlog.get_logger(__name__)


def build_payment_service() -> PaymentService:
    return PaymentService(
        payment_repository=PaymentDjangoRepository(),
        order_repository=OrderDjangoRepository(),
        order_service=build_order_service(),
        gateway=MidtransSnapGateway(),
    )


class PaymentTokenView(APIView):
    """POST /api/v1/orders/{order_id}/payment/"""

    permission_classes = [AllowAny]
    throttle_scope = "payment_token"

    def post(self, request: Request, order_id: UUID) -> Response:
        service = build_payment_service()
        try:
            token = service.create_payment_token(order_id)
        except OrderNotFound:
            return error_response("Order not found.", status=status.HTTP_404_NOT_FOUND)
        except (OrderNotPending, PaymentAlreadyExists) as exc:
            return error_response(str(exc), status=status.HTTP_400_BAD_REQUEST)
        except GatewayError:
            return error_response(
                "Failed to create payment token.", status=status.HTTP_502_BAD_GATEWAY
            )

        return success_response(PaymentTokenSerializer(token.model_dump()).data)


class MidtransWebhookView(APIView):
    """POST /api/v1/webhooks/midtrans/

    Every outcome other than 200 makes the gateway redeliver later.
    """

    permission_classes = [AllowAny]
    authentication_classes: list = []
    throttle_classes: list = []

    def post(self, request: Request) -> Response:
        serializer = PaymentNotificationSerializer(data=request.data)
        if not serializer.is_valid():
            logger.warning("payment.webhook_malformed", fields=sorted(serializer.errors))
            return error_response(
                "Invalid request body",
                status=status.HTTP_400_BAD_REQUEST,
                details=serializer.errors,
            )

        notification = PaymentNotificationDTO(**{**request.data, **serializer.validated_data})
        service = build_payment_service()
        try:
            service.process_webhook_notification(notification)
        except InvalidSignature:
            return error_response("Invalid signature", status=status.HTTP_401_UNAUTHORIZED)
        except PaymentNotFound:
            return error_response("Payment not found", status=status.HTTP_404_NOT_FOUND)
        except InvalidAmount:
            return error_response("Invalid amount", status=status.HTTP_400_BAD_REQUEST)
        except (OrderNotFound, InvalidStatusTransition):
            return error_response(
                "Failed to process webhook",
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return success_response(message="Notification processed.")
