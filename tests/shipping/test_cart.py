import pytest

from cart import cart_subtotal, expand_items, to_centimeters, to_grams
from schemas import CartItem, Measure


class TestToGrams:
    """Conversão de peso para gramas."""

    def test_kg_to_grams(self) -> None:
        assert to_grams(Measure(value=1, unit="kg")) == 1000

    def test_mg_to_grams(self) -> None:
        assert to_grams(Measure(value=1000, unit="mg")) == 1

    def test_grams_and_default_unit_pass_through(self) -> None:
        assert to_grams(Measure(value=500, unit="g")) == 500
        assert to_grams(Measure(value=500)) == 500

    def test_kg_round_trip(self) -> None:
        grams = to_grams(Measure(value=1, unit="kg"))
        assert grams / 1000 == 1

    def test_missing_weight_is_zero(self) -> None:
        assert to_grams(None) == 0
        assert to_grams(Measure()) == 0


class TestToCentimeters:
    """Conversão de dimensões para centímetros (nunca zero)."""

    def test_meters_to_cm(self) -> None:
        assert to_centimeters(Measure(value=1, unit="m")) == 100

    def test_millimeters_to_cm(self) -> None:
        assert to_centimeters(Measure(value=10, unit="mm")) == 1

    def test_cm_pass_through(self) -> None:
        assert to_centimeters(Measure(value=25, unit="cm")) == 25

    @pytest.mark.parametrize("dimension", [None, Measure(), Measure(value=0, unit="cm")])
    def test_missing_or_zero_defaults_to_one(self, dimension) -> None:
        assert to_centimeters(dimension) == 1


class TestExpandItems:
    """Cada unidade vira uma entrada para a Pakman."""

    def test_quantity_expands_into_unit_entries(self, cart_item) -> None:
        items = [CartItem(**cart_item("p1", quantity=3, price=19.9))]
        itens = expand_items(items)
        assert len(itens) == 3
        assert itens[0] == {
            "productValue": pytest.approx(1990),
            "dimension": {"height": 10, "width": 20, "length": 30, "weight": 500},
        }
        assert itens[0] is not itens[1]

    def test_converts_units_per_entry(self) -> None:
        item = CartItem(
            product_id="p2",
            quantity=1,
            price=10,
            weight={"value": 1.5, "unit": "kg"},
            dimensions={"height": {"value": 0.2, "unit": "m"}, "width": {"value": 50, "unit": "mm"}},
        )
        [entry] = expand_items([item])
        assert entry["dimension"]["weight"] == 1500
        assert entry["dimension"]["height"] == pytest.approx(20)
        assert entry["dimension"]["width"] == 5
        assert entry["dimension"]["length"] == 1

    def test_final_price_is_used_as_unit_price(self, cart_item) -> None:
        item = CartItem(**cart_item("p1", price=100, final_price=80))
        [entry] = expand_items([item])
        assert entry["productValue"] == 8000


class TestCartSubtotal:
    def test_sums_price_times_quantity(self, cart_item) -> None:
        items = [CartItem(**cart_item("p1", quantity=2, price=10)), CartItem(**cart_item("p2", price=5.5))]
        assert cart_subtotal(items) == pytest.approx(25.5)
