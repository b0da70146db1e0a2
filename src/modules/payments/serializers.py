"""Payment DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.payments.models import Payment


class PaymentNotificationSerializer(serializers.Serializer):
    """Shape check for gateway notifications; values are kept as sent."""

    order_id = serializers.CharField(max_length=100)
    status_code = serializers.CharField(max_length=10)
    gross_amount = serializers.CharField(max_length=32)
    signature_key = serializers.CharField()
    transaction_status = serializers.CharField(
        max_length=50, required=False, allow_blank=True, default=""
    )
    transaction_id = serializers.CharField(
        max_length=100, required=False, allow_blank=True, default=""
    )
    transaction_time = serializers.CharField(required=False, allow_blank=True, default="")
    settlement_time = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, default=None
    )
    status_message = serializers.CharField(required=False, allow_blank=True, default="")
    payment_type = serializers.CharField(
        max_length=50, required=False, allow_blank=True, default=""
    )
    fraud_status = serializers.CharField(
        max_length=50, required=False, allow_blank=True, default=""
    )
    merchant_id = serializers.CharField(required=False, allow_blank=True, default="")
    currency = serializers.CharField(required=False, allow_blank=True, default="")


class PaymentTokenSerializer(serializers.Serializer):
    payment_id = serializers.UUIDField()
    token = serializers.CharField()
    redirect_url = serializers.URLField()


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = [
            "id",
            "order_id",
            "gateway_order_id",
            "gross_amount",
            "payment_type",
            "transaction_status",
            "transaction_id",
            "transaction_time",
            "settlement_time",
            "fraud_status",
            "status_message",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
