import pytest

from schemas import CalculateShippingInput, MerchantOptions


def _cart_item(product_id: str = "p1", quantity: int = 1, price: float = 50.0, **extra) -> dict:
    item = {
        "sku": f"SKU-{product_id}",
        "product_id": product_id,
        "quantity": quantity,
        "price": price,
        "weight": {"value": 500, "unit": "g"},
        "dimensions": {
            "height": {"value": 10, "unit": "cm"},
            "width": {"value": 20, "unit": "cm"},
            "length": {"value": 30, "unit": "cm"},
        },
    }
    item.update(extra)
    return item


def _module_body(params: dict | None = None, data: dict | None = None, hidden_data: dict | None = None) -> dict:
    if params is None:
        params = {"to": {"zip": "01310-100"}, "items": [_cart_item(quantity=2)]}
    return {
        "params": params,
        "application": {
            "data": data if data is not None else {},
            "hidden_data": hidden_data if hidden_data is not None else {"apikey": "pak-key"},
        },
    }


@pytest.fixture
def cart_item():
    """Factory de item de carrinho (500 g, 10x20x30 cm)."""
    return _cart_item


@pytest.fixture
def module_body():
    """Factory do body enviado pela plataforma (params + application)."""
    return _module_body


@pytest.fixture
def make_payload():
    def _make(**kwargs) -> CalculateShippingInput:
        return CalculateShippingInput.model_validate(_module_body(**kwargs))
    return _make


@pytest.fixture
def make_options():
    def _make(**fields) -> MerchantOptions:
        return MerchantOptions.merge(fields, None)
    return _make
