"""
Intake Service - Turns raw form fields into a price request.

Handles the form-side concerns around the resolver: required-field checks,
checkbox toggling, label normalization and the project summary.
"""
from dataclasses import dataclass, field
from typing import Optional

from ..engine.models import PriceRequest, normalize_service_type
from ..engine.price_resolver import parse_circumference


REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields"

TREE_TYPE_DESCRIPTIONS = {
    'leafy': 'Broad-leaved trees',
    'pokey': 'Coniferous trees',
}

SERVICE_TYPE_DESCRIPTIONS = {
    'tree trim': 'Tree trimming only',
    'remove stump': 'Stump removal only',
    'both': 'Tree trimming & stump removal',
}

ESTIMATE_INCLUDES = (
    'Professional tree removal service',
    'Debris cleanup and disposal',
    'Safety equipment and insurance',
    'Site restoration',
)

ESTIMATE_DISCLAIMER = (
    "* This is an estimate. Final price may vary based on site conditions "
    "and additional requirements."
)


@dataclass
class FormSubmission:
    """Raw form state, exactly as the widgets hold it."""
    obstacles: list[str] = field(default_factory=list)
    tree_type: str = ''
    service_type: str = ''
    circumference: str = ''

    def is_empty(self) -> bool:
        return not (self.obstacles or self.tree_type or self.service_type or str(self.circumference).strip())


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip().lower()
    return text or None


def toggle_obstacle(obstacles: list[str], obstacle: str) -> list[str]:
    """Checkbox toggle: remove the obstacle if selected, append it otherwise."""
    if obstacle in obstacles:
        return [item for item in obstacles if item != obstacle]
    return [*obstacles, obstacle]


def missing_required_fields(form: FormSubmission) -> list[str]:
    """Names of required fields left empty (tree type, service type, circumference)."""
    missing = []
    if not _clean(form.tree_type):
        missing.append('tree_type')
    if not _clean(form.service_type):
        missing.append('service_type')
    if not _clean(form.circumference):
        missing.append('circumference')
    return missing


def build_price_request(form: FormSubmission) -> PriceRequest:
    """
    Build a PriceRequest from the form.

    Circumference is parsed to a number here; text that does not parse is
    passed through untouched so the resolver reports it as unpriceable.
    """
    circumference = parse_circumference(form.circumference)
    return PriceRequest(
        obstacles=frozenset(o for o in (_clean(x) for x in form.obstacles) if o),
        tree_type=_clean(form.tree_type),
        service_type=normalize_service_type(form.service_type),
        circumference=circumference if circumference is not None else form.circumference,
    )


def summarize_form(form: FormSubmission) -> dict:
    """Quick stats for the project summary panel."""
    circumference = str(form.circumference).strip()
    return {
        'Obstacles': len(form.obstacles),
        'Tree Type': form.tree_type or 'Not selected',
        'Service': form.service_type or 'Not selected',
        'Circumference': f'{circumference}"' if circumference else 'Not entered',
    }


def format_price(price: int) -> str:
    """Format a whole-dollar estimate, e.g. ``$1,250``."""
    return f"${price:,}"
