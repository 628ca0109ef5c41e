"""Unit normalization for stocked items and recipe lines.

Every quantity the engine stores or compares is expressed in base units:
grams for mass, milliliters for volume and pieces for count. Mass and volume
share one measure scale (1 ml counts as 1 g), so a recipe may quote milk in
LITERS against an item bought in KGS. Count units never mix with either.
"""

from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Union

from kitchen_ledger.core.exceptions import IncompatibleUnitError, InvalidUnitError

FOUR_PLACES = Decimal("0.0001")


class MeasurementUnit(str, Enum):
    """Units a pack or a recipe line may be denominated in."""

    GRAMS = "GRAMS"
    KGS = "KGS"
    POUNDS = "POUNDS"
    MILLILITERS = "MILLILITERS"
    LITERS = "LITERS"
    PIECES = "PIECES"
    BOXES = "BOXES"


class UnitFamily(str, Enum):
    MASS = "MASS"
    VOLUME = "VOLUME"
    COUNT = "COUNT"


# Conversion factors TO the base unit of each family
BASE_UNIT_FACTORS = {
    MeasurementUnit.GRAMS: Decimal("1"),
    MeasurementUnit.KGS: Decimal("1000"),
    MeasurementUnit.POUNDS: Decimal("453.592"),
    MeasurementUnit.MILLILITERS: Decimal("1"),
    MeasurementUnit.LITERS: Decimal("1000"),
    MeasurementUnit.PIECES: Decimal("1"),
    MeasurementUnit.BOXES: Decimal("1"),
}

UNIT_FAMILIES = {
    MeasurementUnit.GRAMS: UnitFamily.MASS,
    MeasurementUnit.KGS: UnitFamily.MASS,
    MeasurementUnit.POUNDS: UnitFamily.MASS,
    MeasurementUnit.MILLILITERS: UnitFamily.VOLUME,
    MeasurementUnit.LITERS: UnitFamily.VOLUME,
    MeasurementUnit.PIECES: UnitFamily.COUNT,
    MeasurementUnit.BOXES: UnitFamily.COUNT,
}

BASE_UNIT_LABELS = {
    UnitFamily.MASS: "g",
    UnitFamily.VOLUME: "ml",
    UnitFamily.COUNT: "pcs",
}

# Lower-case spellings accepted on input
UNIT_ALIASES = {
    "g": MeasurementUnit.GRAMS,
    "gram": MeasurementUnit.GRAMS,
    "grams": MeasurementUnit.GRAMS,
    "kg": MeasurementUnit.KGS,
    "kgs": MeasurementUnit.KGS,
    "kilogram": MeasurementUnit.KGS,
    "kilograms": MeasurementUnit.KGS,
    "lb": MeasurementUnit.POUNDS,
    "lbs": MeasurementUnit.POUNDS,
    "pound": MeasurementUnit.POUNDS,
    "pounds": MeasurementUnit.POUNDS,
    "ml": MeasurementUnit.MILLILITERS,
    "milliliter": MeasurementUnit.MILLILITERS,
    "milliliters": MeasurementUnit.MILLILITERS,
    "l": MeasurementUnit.LITERS,
    "liter": MeasurementUnit.LITERS,
    "liters": MeasurementUnit.LITERS,
    "litre": MeasurementUnit.LITERS,
    "litres": MeasurementUnit.LITERS,
    "pc": MeasurementUnit.PIECES,
    "pcs": MeasurementUnit.PIECES,
    "piece": MeasurementUnit.PIECES,
    "pieces": MeasurementUnit.PIECES,
    "ea": MeasurementUnit.PIECES,
    "box": MeasurementUnit.BOXES,
    "boxes": MeasurementUnit.BOXES,
}

UnitLike = Union[MeasurementUnit, str]
Number = Union[Decimal, int, str]


def quantize(value: Decimal) -> Decimal:
    """Round a quantity or amount to the four places the ledger stores."""
    return value.quantize(FOUR_PLACES, rounding=ROUND_HALF_UP)


def parse_unit(unit: UnitLike) -> MeasurementUnit:
    """Resolve an enum member, enum name or alias. Unknown units are an error."""
    if isinstance(unit, MeasurementUnit):
        return unit
    if not isinstance(unit, str) or not unit.strip():
        raise InvalidUnitError(unit)
    raw = unit.strip()
    try:
        return MeasurementUnit(raw.upper())
    except ValueError:
        pass
    try:
        return UNIT_ALIASES[raw.lower()]
    except KeyError:
        raise InvalidUnitError(unit) from None


def unit_family(unit: UnitLike) -> UnitFamily:
    return UNIT_FAMILIES[parse_unit(unit)]


def base_unit_label(unit: UnitLike) -> str:
    """Short label of the base unit quantities of ``unit`` are stored in."""
    return BASE_UNIT_LABELS[unit_family(unit)]


def is_count_unit(unit: UnitLike) -> bool:
    return unit_family(unit) == UnitFamily.COUNT


def to_base_units(value: Number, unit: UnitLike) -> Decimal:
    """Convert ``value`` in ``unit`` to grams, milliliters or pieces."""
    return Decimal(str(value)) * BASE_UNIT_FACTORS[parse_unit(unit)]


def from_base_units(value: Number, unit: UnitLike) -> Decimal:
    """Convert a base-unit quantity back to ``unit``."""
    return Decimal(str(value)) / BASE_UNIT_FACTORS[parse_unit(unit)]


def ensure_compatible(from_unit: UnitLike, to_unit: UnitLike, item_name: str = "") -> None:
    """Raise IncompatibleUnitError when a count unit meets a measure unit."""
    if is_count_unit(from_unit) != is_count_unit(to_unit):
        raise IncompatibleUnitError(
            parse_unit(from_unit).value, parse_unit(to_unit).value, item_name
        )


def item_quantity_to_base_units(item, value: Number, unit: UnitLike) -> Decimal:
    """Normalize a quantity quoted against ``item`` into the item's base units.

    The quoted unit must be convertible to the unit the item's packs are
    denominated in.
    """
    ensure_compatible(unit, item.unit, item.name)
    return to_base_units(value, unit)
