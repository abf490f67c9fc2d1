import pytest

from confpay.payments.statuses import PaymentStatus, map_status

@pytest.mark.parametrize("provider,expected", [
    ("Completed", PaymentStatus.COMPLETED),
    ("Pending", PaymentStatus.PENDING),
    ("Refunded", PaymentStatus.REFUNDED),
    ("Reversed", PaymentStatus.REFUNDED),
    ("Denied", PaymentStatus.FAILED),
    ("Failed", PaymentStatus.FAILED),
])
def test_known_statuses(provider, expected):
    assert map_status(provider) is expected

@pytest.mark.parametrize("provider", ["In-Progress", "completed", "", None, "Canceled_Reversal"])
def test_unknown_status_is_pending(provider):
    assert map_status(provider) is PaymentStatus.PENDING
