import pytest

from storefront.errors import InvalidShipping
from storefront.payments.schemas import ShippingInfo
from storefront.payments.shipping import collect_errors, country_code, validate_shipping


def _shipping(**overrides):
    data = {
        "email": "a@b.co",
        "name": "Jo",
        "address": "1 Main",
        "city": "NY",
        "country": "US",
        "zip": "100",
    }
    data.update(overrides)
    return ShippingInfo(**data)


def test_minimal_valid_shipping_passes():
    s = _shipping()
    assert collect_errors(s) == {}
    assert validate_shipping(s) is s


def test_invalid_email_is_reported():
    errors = collect_errors(_shipping(email="not-an-email"))
    assert errors == {"email": "Please enter a valid email"}


def test_errors_are_collected_for_every_field():
    s = _shipping(email="nope", name="J", address="1 Ma", city="N", country="U", zip="10")
    with pytest.raises(InvalidShipping) as exc:
        validate_shipping(s)
    assert set(exc.value.fields) == {"email", "name", "address", "city", "country", "zip"}
    assert exc.value.to_payload()["fields"]["zip"] == "ZIP/Postal code is required"
    assert exc.value.status_code == 400


def test_lengths_are_checked_after_trimming():
    errors = collect_errors(_shipping(name="  J  ", city=" NY "))
    assert "name" in errors
    assert "city" not in errors


@pytest.mark.parametrize("country, code", [
    ("United States", "US"),
    ("usa", "US"),
    ("UK", "GB"),
    ("  Canada ", "CA"),
    ("Germany", "DE"),
    ("Portugal", "PO"),
    ("fr", "FR"),
])
def test_country_code(country, code):
    assert country_code(country) == code
