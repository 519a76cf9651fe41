"""
Price Resolver - Turns a tree-service request into a ballpark price.

Pure functions: the request and the pricing table are explicit parameters,
nothing is cached and neither argument is mutated.

Resolution order:
1. Parse circumference (unparseable -> unpriceable)
2. Find the first bracket containing it (none -> unpriceable)
3. Tree-type surcharge
4. Obstacle surcharges, through the OBSTACLE_COLUMNS alias table
5. Service add-on (stump removal for "remove-stump" and "both")
6. Round half up to a whole price
"""
import math
from typing import Optional, Any, Iterable

from .models import (
    PriceRequest,
    PriceResult,
    PricingTableRow,
    TREE_TYPES,
    SERVICE_TREE_TRIM,
    SERVICE_REMOVE_STUMP,
    SERVICE_BOTH,
    STATUS_PRICED,
    STATUS_UNPRICEABLE,
    REASON_INVALID_CIRCUMFERENCE,
    REASON_NO_MATCHING_BRACKET,
    normalize_service_type,
)


# Obstacle tag -> pricing column. House and shed share one column, and each
# selected tag is charged on its own, so both together pay houseShed twice.
OBSTACLE_COLUMNS = {
    'house': 'houseShed',
    'shed': 'houseShed',
    'fence': 'fence',
    'powerlines': 'powerlines',
    'garden': 'garden',
}

# Service type -> add-on columns. Tree trimming is carried by the tree-type
# surcharge alone; "both" does not charge the tree type a second time.
SERVICE_COLUMNS = {
    SERVICE_TREE_TRIM: (),
    SERVICE_REMOVE_STUMP: ('stumpRemoval',),
    SERVICE_BOTH: ('stumpRemoval',),
}


class UnpriceableRequestError(ValueError):
    """Raised in strict mode when no estimate can be produced."""

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason


def parse_circumference(value: Any) -> Optional[float]:
    """
    Parse a circumference in inches.

    Returns None for anything that is not a finite number
    (None, "", "abc", NaN, infinity, booleans).
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def find_bracket(circumference: float, table: Iterable[PricingTableRow]) -> Optional[PricingTableRow]:
    """Return the first row whose size range contains the circumference."""
    for row in table:
        if row.size_range.contains(circumference):
            return row
    return None


def round_price(total: float) -> int:
    """Round to the nearest whole price, halves up."""
    return int(math.floor(total + 0.5))


def resolve_price_detailed(request: PriceRequest, table: Iterable[PricingTableRow]) -> PriceResult:
    """
    Resolve a request with full traceability.

    Never raises: failures come back as an "unpriceable" result with a reason
    and price 0.
    """
    circumference = parse_circumference(request.circumference)
    if circumference is None:
        result = PriceResult(status=STATUS_UNPRICEABLE, reason=REASON_INVALID_CIRCUMFERENCE)
        result.add_trace("Circumference", "Could not parse circumference", repr(request.circumference))
        return result

    row = find_bracket(circumference, table)
    if row is None:
        result = PriceResult(
            status=STATUS_UNPRICEABLE,
            reason=REASON_NO_MATCHING_BRACKET,
            circumference=circumference,
        )
        result.add_trace("Bracket Lookup", "No bracket covers circumference", f'{circumference:g}"')
        return result

    result = PriceResult(status=STATUS_PRICED, bracket=row.size_range, circumference=circumference)
    result.add_trace("Bracket Lookup", f'Circumference {circumference:g}" matched bracket', str(row.size_range))

    # Tree type
    tree_type = request.tree_type
    if tree_type and tree_type not in TREE_TYPES:
        result.add_warning(f"Unknown tree type '{tree_type}' ignored")
    elif tree_type:
        amount = row.surcharge(tree_type)
        if amount:
            result.add_line("tree_type", tree_type, tree_type, amount)
            result.add_trace("Tree Type", f"{tree_type} surcharge", f"${amount:g}")
        else:
            result.add_trace("Tree Type", f"No {tree_type} surcharge in bracket")
    else:
        result.add_trace("Tree Type", "Tree type not selected")

    # Obstacles (summation order does not matter; sorted for a stable trace)
    for obstacle in sorted(request.obstacles, key=str):
        column = OBSTACLE_COLUMNS.get(obstacle)
        if column is None:
            result.add_warning(f"Unknown obstacle '{obstacle}' ignored")
            continue
        amount = row.surcharge(column)
        if amount:
            result.add_line("obstacle", obstacle, column, amount)
            result.add_trace("Obstacle", f"{obstacle} → {column}", f"${amount:g}")
        else:
            result.add_trace("Obstacle", f"No {column} surcharge for {obstacle}")

    # Service add-ons
    service_type = normalize_service_type(request.service_type)
    if service_type in SERVICE_COLUMNS:
        for column in SERVICE_COLUMNS[service_type]:
            amount = row.surcharge(column)
            if amount:
                result.add_line("service", service_type, column, amount)
                result.add_trace("Service", f"{service_type} adds {column}", f"${amount:g}")
            else:
                result.add_trace("Service", f"No {column} surcharge in bracket")
        if not SERVICE_COLUMNS[service_type]:
            result.add_trace("Service", f"{service_type} carried by tree type surcharge")
    elif service_type:
        result.add_warning(f"Unknown service type '{request.service_type}' ignored")
    else:
        result.add_trace("Service", "Service type not selected")

    result.price = round_price(result.subtotal)
    result.add_trace("Total", f"Sum of {len(result.lines)} surcharges, rounded", f"${result.price}")
    return result


def raise_for_unpriceable(result: PriceResult, raw_circumference: Any = None):
    """Raise UnpriceableRequestError if the result carries no estimate."""
    if result.priced:
        return
    if result.reason == REASON_INVALID_CIRCUMFERENCE:
        message = f"Circumference {raw_circumference!r} is not a number"
    else:
        message = f'No pricing bracket covers a circumference of {result.circumference:g}"'
    raise UnpriceableRequestError(result.reason, message)


def resolve_price(request: PriceRequest, table: Iterable[PricingTableRow], strict: bool = False) -> int:
    """
    Resolve a request to a whole-dollar price.

    Returns 0 when no estimate is available. With ``strict=True`` an
    UnpriceableRequestError is raised instead.
    """
    result = resolve_price_detailed(request, table)
    if strict:
        raise_for_unpriceable(result, request.circumference)
    return result.price
