import itertools
import math
import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from canopy_calculator.engine import (
    PriceRequest,
    PricingTableRow,
    SizeRange,
    resolve_price,
    resolve_price_detailed,
    UnpriceableRequestError,
)
from canopy_calculator.engine.price_resolver import (
    OBSTACLE_COLUMNS,
    parse_circumference,
    find_bracket,
    round_price,
)


@pytest.fixture(scope="module")
def table():
    """Bracket 10-20 from the worked examples, plus a neighbour with gaps in its columns."""
    return (
        PricingTableRow(
            size_range=SizeRange(10, 20),
            leafy=50, pokey=70, house_shed=30, fence=20, stump_removal=40,
        ),
        PricingTableRow(
            size_range=SizeRange(21, 30),
            leafy=120, house_shed=60, fence=35, powerlines=120, garden=25,
        ),
    )


def test_trim_leafy_no_obstacles(table):
    req = PriceRequest(circumference=15, tree_type="leafy", service_type="tree trim", obstacles=[])
    assert resolve_price(req, table) == 50


def test_remove_stump_with_fence(table):
    req = PriceRequest(circumference=15, tree_type="leafy", service_type="remove stump", obstacles=["fence"])
    assert resolve_price(req, table) == 50 + 20 + 40


def test_both_with_house_and_shed(table):
    req = PriceRequest(circumference=15, tree_type="pokey", service_type="both", obstacles=["house", "shed"])
    assert resolve_price(req, table) == 70 + 30 + 30 + 40


def test_circumference_below_every_bracket(table):
    req = PriceRequest(circumference=5, tree_type="leafy", service_type="tree trim")
    assert resolve_price(req, table) == 0


def test_unparseable_circumference(table):
    req = PriceRequest(circumference="abc", tree_type="leafy", service_type="tree trim")
    assert resolve_price(req, table) == 0


@pytest.mark.parametrize("circumference", [-1, 20.5, 30.01, 1000])
def test_outside_every_bracket_is_zero(table, circumference):
    req = PriceRequest(circumference=circumference, tree_type="pokey", service_type="both", obstacles=["house"])
    result = resolve_price_detailed(req, table)
    assert result.price == 0
    assert result.status == "unpriceable"
    assert result.reason == "no_matching_bracket"
    assert result.lines == []


@pytest.mark.parametrize("circumference", [10, 20, "10", " 20 "])
def test_bracket_bounds_are_inclusive(table, circumference):
    req = PriceRequest(circumference=circumference, tree_type="leafy", service_type="tree-trim")
    assert resolve_price(req, table) == 50


def test_obstacle_order_does_not_change_total(table):
    obstacles = ["house", "shed", "fence", "powerlines", "garden"]
    totals = {
        resolve_price(PriceRequest(circumference=25, tree_type="leafy", service_type="both", obstacles=perm), table)
        for perm in itertools.permutations(obstacles)
    }
    assert totals == {120 + 60 + 60 + 35 + 120 + 25}


def test_house_and_shed_each_charge_house_shed(table):
    only_house = PriceRequest(circumference=15, obstacles=["house"])
    both = PriceRequest(circumference=15, obstacles=["house", "shed"])
    assert resolve_price(only_house, table) == 30
    assert resolve_price(both, table) == 60

    result = resolve_price_detailed(both, table)
    assert [line.column for line in result.lines] == ["houseShed", "houseShed"]
    assert OBSTACLE_COLUMNS["house"] == OBSTACLE_COLUMNS["shed"] == "houseShed"


def test_both_charges_tree_type_once(table):
    result = resolve_price_detailed(
        PriceRequest(circumference=15, tree_type="pokey", service_type="both"), table
    )
    components = [line.component for line in result.lines]
    assert components.count("tree_type") == 1
    assert [line.column for line in result.lines if line.component == "service"] == ["stumpRemoval"]
    assert result.price == 70 + 40


def test_tree_trim_adds_nothing_beyond_tree_type(table):
    trim = PriceRequest(circumference=15, tree_type="leafy", service_type="tree-trim")
    unset = PriceRequest(circumference=15, tree_type="leafy")
    assert resolve_price(trim, table) == resolve_price(unset, table) == 50


def test_unset_tree_type_contributes_nothing(table):
    req = PriceRequest(circumference=15, service_type="remove-stump", obstacles=["fence"])
    result = resolve_price_detailed(req, table)
    assert result.priced
    assert result.price == 20 + 40


def test_undefined_columns_contribute_nothing(table):
    # The 21-30 bracket has no pokey or stumpRemoval value
    req = PriceRequest(circumference=25, tree_type="pokey", service_type="remove stump", obstacles=["garden"])
    result = resolve_price_detailed(req, table)
    assert result.priced
    assert result.price == 25


def test_unknown_service_and_obstacle_are_ignored(table):
    req = PriceRequest(circumference=15, tree_type="leafy", service_type="grinding", obstacles=["pool", "fence"])
    result = resolve_price_detailed(req, table)
    assert result.price == 50 + 20
    assert any("grinding" in w for w in result.warnings)
    assert any("pool" in w for w in result.warnings)


def test_obstacles_have_set_semantics():
    req = PriceRequest(obstacles=["fence", "fence", "house"])
    assert req.obstacles == frozenset({"fence", "house"})


def test_resolution_is_idempotent(table):
    req = PriceRequest(circumference="18.5", tree_type="pokey", service_type="both", obstacles=["house", "fence"])
    before = tuple(table)
    first = resolve_price(req, table)
    second = resolve_price(req, table)
    assert first == second == 70 + 30 + 20 + 40
    assert tuple(table) == before
    assert req.circumference == "18.5"


def test_fractional_total_rounds_half_up():
    table = [PricingTableRow(size_range=SizeRange(0, 10), leafy=10.5, fence=0.25)]
    assert resolve_price(PriceRequest(circumference=5, tree_type="leafy"), table) == 11
    assert resolve_price(PriceRequest(circumference=5, tree_type="leafy", obstacles=["fence"]), table) == 11
    assert round_price(2.5) == 3
    assert round_price(2.49) == 2


def test_first_matching_bracket_wins_on_shared_boundary():
    overlapping = [
        PricingTableRow(size_range=SizeRange(0, 10), leafy=1),
        PricingTableRow(size_range=SizeRange(10, 20), leafy=2),
    ]
    assert find_bracket(10, overlapping).leafy == 1
    assert resolve_price(PriceRequest(circumference=10, tree_type="leafy"), overlapping) == 1


def test_empty_table_is_unpriceable():
    assert resolve_price(PriceRequest(circumference=15, tree_type="leafy"), []) == 0


@pytest.mark.parametrize("value", [None, "", "abc", "15in", float("nan"), float("inf"), "-inf", "1e400", 10**400, True, [15]])
def test_parse_circumference_rejects_non_numbers(value):
    assert parse_circumference(value) is None


@pytest.mark.parametrize("value, expected", [(15, 15.0), ("15", 15.0), (" 7.5 ", 7.5), ("-3", -3.0), (0, 0.0)])
def test_parse_circumference_accepts_numbers(value, expected):
    assert math.isclose(parse_circumference(value), expected)


def test_strict_mode_raises_for_unparseable(table):
    with pytest.raises(UnpriceableRequestError) as exc:
        resolve_price(PriceRequest(circumference="abc", tree_type="leafy"), table, strict=True)
    assert exc.value.reason == "invalid_circumference"
    assert "abc" in str(exc.value)


def test_strict_mode_raises_for_missing_bracket(table):
    with pytest.raises(UnpriceableRequestError) as exc:
        resolve_price(PriceRequest(circumference=5, tree_type="leafy"), table, strict=True)
    assert exc.value.reason == "no_matching_bracket"


def test_strict_mode_returns_price_when_priced(table):
    assert resolve_price(PriceRequest(circumference=15, tree_type="leafy"), table, strict=True) == 50


def test_trace_explains_resolution(table):
    result = resolve_price_detailed(
        PriceRequest(circumference=15, tree_type="pokey", service_type="both", obstacles=["shed"]), table
    )
    text = result.get_trace_text()
    assert "10-20" in text
    assert "shed → houseShed" in text
    assert result.trace[-1].step == "Total"
    assert result.to_dict()["Bracket"] == "10-20"


@pytest.mark.parametrize("circumference", [10**400, -10**400, "1e400"])
def test_huge_circumference_is_unpriceable(table, circumference):
    req = PriceRequest(circumference=circumference, tree_type="leafy", service_type="tree trim")
    assert resolve_price(req, table) == 0
    assert resolve_price_detailed(req, table).reason == "invalid_circumference"


def test_non_string_obstacle_is_ignored_with_warning(table):
    result = resolve_price_detailed(PriceRequest(circumference=15, obstacles=["fence", 3]), table)
    assert result.priced
    assert result.price == 20
    assert any("'3'" in w for w in result.warnings)
    assert resolve_price(PriceRequest(circumference=15, obstacles=["fence", 3]), table) == 20
