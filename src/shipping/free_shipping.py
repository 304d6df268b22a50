"""
Free shipping evaluation from the merchant's configured rules.

Independent of carrier pricing: runs even in preview mode (no destination).
"""

from typing import List, Optional

from schemas import CartItem, FreeShippingRule, MerchantOptions


def zip_in_range(rule: FreeShippingRule, destination_zip: str) -> bool:
    """
    CEPs are compared as strings (fixed-width, zero-padded).
    Bounds are padded to the destination width since merchants often
    configure them as integers, losing leading zeros.
    """
    if not destination_zip or rule.zip_range is None:
        return True
    # Not a raw string comparison: bounds are digits-only and zero-padded,
    # which matches raw comparison only for 8-digit CEPs on both sides.
    width = len(destination_zip)
    low, high = rule.zip_range.min, rule.zip_range.max
    if low is not None and destination_zip < low.zfill(width):
        return False
    if high is not None and destination_zip > high.zfill(width):
        return False
    return True


def matches_products(rule: FreeShippingRule, items: List[CartItem]) -> bool:
    ids = set(rule.product_ids or [])
    if rule.all_product_ids:
        return bool(items) and all(item.product_id in ids for item in items)
    return any(item.product_id in ids for item in items)


def evaluate_free_shipping(
    options: MerchantOptions,
    items: Optional[List[CartItem]],
    destination_zip: str = "",
) -> Optional[float]:
    """
    Returns the cart amount from which shipping is free, 0 for unconditional
    free shipping, or None when nothing applies.

    The first unconditional rule stops the scan; otherwise a matching rule
    only raises the threshold.
    """
    items = items or []
    threshold = None
    if options.free_shipping_from_value is not None and options.free_shipping_from_value >= 0:
        threshold = options.free_shipping_from_value

    for rule in options.free_shipping_rules:
        if rule is None or not zip_in_range(rule, destination_zip):
            continue
        has_min_amount = rule.min_amount is not None
        if not has_min_amount and not rule.product_ids:
            continue

        product_match = True
        if rule.product_ids:
            product_match = matches_products(rule, items)

        if not has_min_amount and product_match:
            return 0
        if has_min_amount and product_match and (threshold is None or rule.min_amount > threshold):
            threshold = rule.min_amount

    return threshold
