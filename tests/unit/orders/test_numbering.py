from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock

import pytest
from django.db import OperationalError

from modules.orders.exceptions import OrderNumberGenerationFailed
from modules.orders.numbering import (
    OrderNumberGenerator,
    day_prefix,
    format_order_number,
    parse_sequence,
)

pytestmark = pytest.mark.unit

TODAY = date(2025, 1, 7)


def _generator(repo, prefix="MC"):
    return OrderNumberGenerator(repo, prefix=prefix, today=lambda: TODAY)


class TestFormatting:
    def test_day_prefix(self):
        assert day_prefix("MC", TODAY) == "MC-250107"

    @pytest.mark.parametrize(
        ("sequence", "expected"),
        [
            (1, "MC-250107-001"),
            (42, "MC-250107-042"),
            (999, "MC-250107-999"),
            (1000, "MC-250107-1000"),
        ],
    )
    def test_sequence_is_padded_to_three_digits(self, sequence, expected):
        assert format_order_number("MC", TODAY, sequence) == expected

    @pytest.mark.parametrize(
        ("order_number", "expected"),
        [
            ("MC-250107-001", 1),
            ("MC-250107-1000", 1000),
            ("MC-250107-abc", None),
        ],
    )
    def test_parse_sequence(self, order_number, expected):
        assert parse_sequence(order_number) == expected


class TestGenerate:
    def test_uses_repository_counter(self):
        repo = MagicMock()
        repo.next_order_sequence.return_value = 3

        assert _generator(repo).generate() == "MC-250107-003"
        repo.next_order_sequence.assert_called_once_with("MC", TODAY)

    def test_custom_prefix(self):
        repo = MagicMock()
        repo.next_order_sequence.return_value = 1

        assert _generator(repo, prefix="KS").generate() == "KS-250107-001"

    def test_database_error_is_wrapped(self):
        repo = MagicMock()
        repo.next_order_sequence.side_effect = OperationalError("locked")

        with pytest.raises(OrderNumberGenerationFailed) as exc_info:
            _generator(repo).generate()

        assert "2025-01-07" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, OperationalError)

    def test_prefix_defaults_to_setting(self, settings):
        settings.ORDER_NUMBER_PREFIX = "TST"
        repo = MagicMock()
        repo.next_order_sequence.return_value = 7

        generator = OrderNumberGenerator(repo, today=lambda: TODAY)

        assert generator.generate() == "TST-250107-007"
