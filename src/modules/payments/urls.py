"""Payment URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.payments.views import MidtransWebhookView, PaymentTokenView

urlpatterns = [
    path(
        "orders/<uuid:order_id>/payment/",
        PaymentTokenView.as_view(),
        name="order-payment",
    ),
    path(
        "webhooks/midtrans/",
        MidtransWebhookView.as_view(),
        name="midtrans-webhook",
    ),
]
