"""Engine subpackage - pricing table and price resolution."""
from .estimator import CanopyEstimator
from .models import PriceRequest, PriceResult, PricingTableRow, SizeRange
from .price_resolver import resolve_price, resolve_price_detailed, UnpriceableRequestError
from .pricing_table import load_pricing_table, PricingTableError

__all__ = [
    'CanopyEstimator',
    'PriceRequest',
    'PriceResult',
    'PricingTableRow',
    'SizeRange',
    'resolve_price',
    'resolve_price_detailed',
    'UnpriceableRequestError',
    'load_pricing_table',
    'PricingTableError',
]
