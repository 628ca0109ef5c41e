"""Tests for unit normalization."""

import pytest
from decimal import Decimal

from kitchen_ledger.core.exceptions import IncompatibleUnitError, InvalidUnitError
from kitchen_ledger.models.stocked_item import StockedItem
from kitchen_ledger.services.units import (
    MeasurementUnit,
    UnitFamily,
    base_unit_label,
    from_base_units,
    item_quantity_to_base_units,
    parse_unit,
    quantize,
    to_base_units,
    unit_family,
)


class TestToBaseUnits:
    @pytest.mark.parametrize(
        "unit,expected",
        [
            ("GRAMS", Decimal("2")),
            ("KGS", Decimal("2000")),
            ("POUNDS", Decimal("907.184")),
            ("MILLILITERS", Decimal("2")),
            ("LITERS", Decimal("2000")),
            ("PIECES", Decimal("2")),
            ("BOXES", Decimal("2")),
        ],
    )
    def test_factors(self, unit, expected):
        assert to_base_units(Decimal("2"), unit) == expected

    def test_every_unit_round_trips(self):
        for unit in MeasurementUnit:
            value = Decimal("3.25")
            assert from_base_units(to_base_units(value, unit), unit) == value

    def test_unknown_unit_raises(self):
        with pytest.raises(InvalidUnitError) as exc_info:
            to_base_units(1, "OUNCES")
        assert exc_info.value.unit == "OUNCES"

    def test_empty_unit_raises(self):
        with pytest.raises(InvalidUnitError):
            to_base_units(1, "  ")

    def test_accepts_int_and_string_values(self):
        assert to_base_units(3, "KGS") == Decimal("3000")
        assert to_base_units("0.5", "LITERS") == Decimal("500")


class TestParseUnit:
    def test_enum_names_case_insensitive(self):
        assert parse_unit("kgs") == MeasurementUnit.KGS
        assert parse_unit(" Liters ") == MeasurementUnit.LITERS

    def test_aliases(self):
        assert parse_unit("g") == MeasurementUnit.GRAMS
        assert parse_unit("kg") == MeasurementUnit.KGS
        assert parse_unit("lb") == MeasurementUnit.POUNDS
        assert parse_unit("ml") == MeasurementUnit.MILLILITERS
        assert parse_unit("L") == MeasurementUnit.LITERS
        assert parse_unit("pcs") == MeasurementUnit.PIECES
        assert parse_unit("box") == MeasurementUnit.BOXES

    def test_enum_member_passes_through(self):
        assert parse_unit(MeasurementUnit.POUNDS) is MeasurementUnit.POUNDS

    def test_non_string_raises(self):
        with pytest.raises(InvalidUnitError):
            parse_unit(None)


class TestFamilies:
    def test_families(self):
        assert unit_family("KGS") == UnitFamily.MASS
        assert unit_family("LITERS") == UnitFamily.VOLUME
        assert unit_family("BOXES") == UnitFamily.COUNT

    def test_base_labels(self):
        assert base_unit_label("POUNDS") == "g"
        assert base_unit_label("ml") == "ml"
        assert base_unit_label("BOXES") == "pcs"

    def test_measure_units_convert_against_each_other(self):
        milk = StockedItem(name="Milk", unit="KGS", pack_weight=Decimal("1"))
        assert item_quantity_to_base_units(milk, Decimal("0.25"), "LITERS") == Decimal("250")

    def test_count_and_measure_do_not_mix(self):
        eggs = StockedItem(name="Eggs", unit="PIECES", pack_weight=Decimal("12"))
        with pytest.raises(IncompatibleUnitError) as exc_info:
            item_quantity_to_base_units(eggs, Decimal("100"), "GRAMS")
        assert exc_info.value.item_name == "Eggs"
        assert isinstance(exc_info.value, InvalidUnitError)


def test_quantize_rounds_half_up_to_four_places():
    assert quantize(Decimal("1.23455")) == Decimal("1.2346")
    assert quantize(Decimal("2")) == Decimal("2.0000")
