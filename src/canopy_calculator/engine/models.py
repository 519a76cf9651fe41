"""
Data models for the price resolver.

Uses dataclasses for structured, type-safe data representation.
"""
from dataclasses import dataclass, field
from typing import Optional, Any


# Vocabularies
TREE_TYPES = ('leafy', 'pokey')
OBSTACLES = ('house', 'shed', 'fence', 'powerlines', 'garden')

SERVICE_TREE_TRIM = 'tree-trim'
SERVICE_REMOVE_STUMP = 'remove-stump'
SERVICE_BOTH = 'both'
SERVICE_TYPES = (SERVICE_TREE_TRIM, SERVICE_REMOVE_STUMP, SERVICE_BOTH)

# Data-file column -> PricingTableRow attribute
SURCHARGE_COLUMNS = {
    'leafy': 'leafy',
    'pokey': 'pokey',
    'houseShed': 'house_shed',
    'fence': 'fence',
    'powerlines': 'powerlines',
    'garden': 'garden',
    'stumpRemoval': 'stump_removal',
}

STATUS_PRICED = 'priced'
STATUS_UNPRICEABLE = 'unpriceable'

REASON_INVALID_CIRCUMFERENCE = 'invalid_circumference'
REASON_NO_MATCHING_BRACKET = 'no_matching_bracket'


def normalize_service_type(value: Optional[str]) -> Optional[str]:
    """Map a UI label ("tree trim", "Remove_Stump") to its canonical value."""
    if value is None:
        return None
    normalized = '-'.join(str(value).strip().lower().replace('_', ' ').replace('-', ' ').split())
    return normalized or None


@dataclass(frozen=True)
class TraceStep:
    """A single step in the price resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class SizeRange:
    """Inclusive circumference interval in inches."""
    min: float
    max: float

    @classmethod
    def parse(cls, text: str) -> 'SizeRange':
        """Parse a ``"min-max"`` string such as ``"10-20"``."""
        parts = str(text).strip().split('-')
        if len(parts) != 2:
            raise ValueError(f"size range must look like 'min-max', got {text!r}")
        low, high = (float(p.strip()) for p in parts)
        return cls(min=low, max=high)

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def __str__(self) -> str:
        return f"{self.min:g}-{self.max:g}"


@dataclass(frozen=True)
class PricingTableRow:
    """One circumference bracket and its surcharges. ``None`` means not defined."""
    size_range: SizeRange
    leafy: Optional[float] = None
    pokey: Optional[float] = None
    house_shed: Optional[float] = None
    fence: Optional[float] = None
    powerlines: Optional[float] = None
    garden: Optional[float] = None
    stump_removal: Optional[float] = None

    def surcharge(self, column: str) -> Optional[float]:
        """Look up a surcharge by its data-file column key (e.g. ``houseShed``)."""
        attr = SURCHARGE_COLUMNS.get(column)
        if attr is None:
            return None
        return getattr(self, attr)

    def to_record(self) -> dict:
        """Convert back to the data-file record shape."""
        record = {'size': str(self.size_range)}
        for column in SURCHARGE_COLUMNS:
            record[column] = self.surcharge(column)
        return record


@dataclass(frozen=True)
class PriceRequest:
    """A homeowner's tree-service request, built fresh for every submission."""
    obstacles: frozenset = frozenset()
    tree_type: Optional[str] = None
    service_type: Optional[str] = None
    circumference: Any = None  # raw value; parsed by the resolver

    def __post_init__(self):
        # Accept any iterable of tags, store with set semantics
        if not isinstance(self.obstacles, frozenset):
            object.__setattr__(self, 'obstacles', frozenset(self.obstacles or ()))


@dataclass
class PriceLine:
    """A single surcharge added to the total."""
    component: str  # "tree_type", "obstacle" or "service"
    label: str
    column: str
    amount: float


@dataclass
class PriceResult:
    """Tagged outcome of a price resolution."""
    status: str
    price: int = 0
    subtotal: float = 0.0
    reason: Optional[str] = None
    bracket: Optional[SizeRange] = None
    circumference: Optional[float] = None
    lines: list[PriceLine] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    @property
    def priced(self) -> bool:
        return self.status == STATUS_PRICED

    def add_line(self, component: str, label: str, column: str, amount: float):
        """Add a surcharge line and bump the subtotal."""
        self.lines.append(PriceLine(component=component, label=label, column=column, amount=amount))
        self.subtotal += amount

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        """Add a warning, once."""
        if warning not in self.warnings:
            self.warnings.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Flat dict for display and export."""
        return {
            "Status": self.status,
            "Price": self.price,
            "Reason": self.reason,
            "Bracket": str(self.bracket) if self.bracket else None,
            "Circumference": self.circumference,
            "Lines": [
                {
                    "Component": line.component,
                    "Item": line.label,
                    "Column": line.column,
                    "Amount": line.amount,
                }
                for line in self.lines
            ],
        }
