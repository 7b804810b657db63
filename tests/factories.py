"""Test data builders shared across suites."""

from typing import Any

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


def screening_row(external_id: str = "EXT-001", **overrides: Any) -> dict[str, Any]:
    """A valid screening request in the provider's wire format."""
    row = {
        "externalId": external_id,
        "platformId": "amazon",
        "sellerId": "SELLER-9",
        "exportCountry": "CN",
        "destinationCountry": "US",
        "houseBillNumber": "HB0000000001",
        "barcode": f"BC-{external_id}",
        "weight": {"value": 1.25, "unit": "K"},
        "from": {
            "name": "Shenzhen Widgets",
            "line1": "1 Factory Rd",
            "city": "Shenzhen",
            "state": "GD",
            "postalCode": "518000",
            "country": "CN",
        },
        "to": {
            "name": "Jane Roe",
            "line1": "10 Main St",
            "city": "Austin",
            "state": "TX",
            "postalCode": "73301",
            "country": "US",
        },
        "products": [{"sku": "W-1", "description": "Widget", "quantity": 2, "price": 9.5}],
    }
    row.update(overrides)
    return row
