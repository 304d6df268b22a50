"""Cart normalization into Pakman units (grams, centimeters, cents)."""

from typing import Any, Dict, List, Optional

from schemas import CartItem, Measure

# Pakman rejects zero-volume packages.
MIN_DIMENSION_CM = 1


def to_grams(weight: Optional[Measure]) -> float:
    if weight is None or not weight.value:
        return 0
    if weight.unit == "kg":
        return weight.value * 1000
    if weight.unit == "mg":
        return weight.value / 1000
    return weight.value


def to_centimeters(dimension: Optional[Measure]) -> float:
    if dimension is None or not dimension.value:
        return MIN_DIMENSION_CM
    if dimension.unit == "m":
        return dimension.value * 100
    if dimension.unit == "mm":
        return dimension.value / 10
    return dimension.value


def _unit_entry(item: CartItem) -> Dict[str, Any]:
    dimensions = item.dimensions
    return {
        "productValue": item.unit_price * 100,
        "dimension": {
            "height": to_centimeters(dimensions.height if dimensions else None),
            "width": to_centimeters(dimensions.width if dimensions else None),
            "length": to_centimeters(dimensions.length if dimensions else None),
            "weight": to_grams(item.weight),
        },
    }


def expand_items(items: List[CartItem]) -> List[Dict[str, Any]]:
    """One entry per physical unit: Pakman quotes units, not SKU quantities."""
    itens = []
    for item in items:
        entry = _unit_entry(item)
        itens.extend(
            {"productValue": entry["productValue"], "dimension": dict(entry["dimension"])}
            for _ in range(item.quantity)
        )
    return itens


def cart_subtotal(items: List[CartItem]) -> float:
    return sum(item.unit_price * item.quantity for item in items)
