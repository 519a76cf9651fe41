"""
Canopy Estimator - Settings-driven facade over the price resolver.

Loads the pricing table once and prices requests against it. The resolver
functions stay pure; this class only owns the table and the strict flag.
"""
from typing import Optional

from ..config.settings import get_settings, Settings
from .models import PriceRequest, PriceResult
from .price_resolver import resolve_price, resolve_price_detailed, raise_for_unpriceable
from .pricing_table import load_pricing_table


class CanopyEstimator:
    """
    Prices tree-service requests against the configured pricing table.
    """

    def __init__(self, settings: Optional[Settings] = None, verbose: bool = False):
        """Initialize estimator with the pricing table from settings."""
        self.settings = settings or get_settings()
        self.verbose = verbose
        self.table = tuple(load_pricing_table(self.settings.pricing_table, verbose=verbose))

    def reload_data(self):
        """Reload the pricing table from disk."""
        self.table = tuple(load_pricing_table(self.settings.pricing_table, verbose=self.verbose))

    def _strict(self, strict: Optional[bool]) -> bool:
        return self.settings.strict_mode if strict is None else strict

    def estimate(self, request: PriceRequest, strict: Optional[bool] = None) -> PriceResult:
        """
        Price a request with full traceability.

        Args:
            request: The homeowner's selections
            strict: Override settings.strict_mode for this call

        Returns:
            PriceResult; unpriceable results raise UnpriceableRequestError when strict
        """
        result = resolve_price_detailed(request, self.table)
        if self._strict(strict):
            raise_for_unpriceable(result, request.circumference)
        return result

    def estimate_price(self, request: PriceRequest, strict: Optional[bool] = None) -> int:
        """Price a request as a whole-dollar amount (0 when no estimate is available)."""
        return resolve_price(request, self.table, strict=self._strict(strict))
