from decimal import Decimal

from modules.cart.ledger import CartLedger
from modules.pricing.calculator import calculate_breakdown


def _ledger(*items):
    ledger = CartLedger()
    for product_id, price, quantity in items:
        ledger.add_item(product_id, price, quantity)
    return ledger


def test_example_breakdown():
    ledger = _ledger((1, "5.00", 2), (2, "3.50", 1))

    breakdown = calculate_breakdown(ledger.lines, Decimal("2.99"), Decimal("0.10"))

    assert breakdown.subtotal == Decimal("13.50")
    assert breakdown.delivery_fee == Decimal("2.99")
    assert breakdown.tax == Decimal("1.35")
    assert breakdown.total == Decimal("17.84")


def test_empty_ledger_still_charges_delivery():
    breakdown = calculate_breakdown([], Decimal("2.99"), Decimal("0.10"))

    assert breakdown.subtotal == 0
    assert breakdown.tax == 0
    assert breakdown.total == Decimal("2.99")


def test_defaults_come_from_settings():
    breakdown = calculate_breakdown(_ledger((1, "10.00", 1)).lines)
    assert breakdown.delivery_fee == Decimal("2.99")
    assert breakdown.tax == Decimal("1.00")


def test_same_input_same_output():
    ledger = _ledger((1, "4.99", 3), (2, "0.35", 7))
    assert calculate_breakdown(ledger.lines) == calculate_breakdown(ledger.lines)


def test_no_rounding_before_output():
    # 3 x 0.335 = 1.005 exactly; tax is 0.1005
    breakdown = calculate_breakdown(_ledger((1, "0.335", 3)).lines, Decimal("2.99"), Decimal("0.10"))

    assert breakdown.subtotal == Decimal("1.005")
    assert breakdown.tax == Decimal("0.1005")
    assert breakdown.total == breakdown.subtotal + breakdown.delivery_fee + breakdown.tax


def test_rounded_total_matches_rounded_parts():
    breakdown = calculate_breakdown(_ledger((1, "0.335", 3)).lines, Decimal("2.99"), Decimal("0.10")).rounded()

    assert breakdown.subtotal == Decimal("1.01")
    assert breakdown.tax == Decimal("0.10")
    assert breakdown.total == Decimal("4.10")
    assert breakdown.total == breakdown.subtotal + breakdown.delivery_fee + breakdown.tax


def test_to_dict_uses_strings():
    data = calculate_breakdown(_ledger((1, "5.00", 2)).lines).rounded().to_dict()
    assert data == {"subtotal": "10.00", "delivery_fee": "2.99", "tax": "1.00", "total": "13.99"}
