"""Tests for the fixed asset register and depreciation."""

from datetime import date
from decimal import Decimal

import pytest

from projectledger.domain.errors import NotFoundError, ValidationError
from projectledger.domain.fixed_asset import build_depreciation_schedule, calculate_depreciation


def test_depreciation_after_one_year():
    result = calculate_depreciation(Decimal("36525000"), date(2023, 1, 1), 10, date(2024, 1, 1))

    assert result.days_elapsed == 365
    assert result.depreciation_per_year == Decimal("3652500.00")
    assert result.depreciation_per_month == Decimal("304375.00")
    assert result.accumulated_depreciation == Decimal("3650000.00")
    assert result.book_value == Decimal("32875000.00")
    assert result.is_fully_depreciated is False


def test_depreciation_is_capped_at_value():
    """Test an asset past its useful life has a zero book value, never negative."""
    result = calculate_depreciation(Decimal("1000000"), date(2010, 1, 1), 4, date(2024, 1, 1))

    assert result.accumulated_depreciation == Decimal("1000000")
    assert result.book_value == Decimal("0")
    assert result.is_fully_depreciated is True


def test_no_depreciation_before_acquisition():
    result = calculate_depreciation(Decimal("1000"), date(2024, 6, 1), 5, date(2024, 1, 1))
    assert result.days_elapsed == 0
    assert result.accumulated_depreciation == Decimal("0.00")
    assert result.book_value == Decimal("1000.00")


def test_depreciation_requires_positive_life():
    with pytest.raises(ValidationError):
        calculate_depreciation(Decimal("1000"), date(2024, 1, 1), 0, date(2024, 6, 1))


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"name": ""}, "name must not be empty"),
        ({"value": Decimal("0")}, "value must be positive"),
        ({"useful_life_years": -1}, "Useful life must be positive"),
        ({"accumulated_depreciation": Decimal("2000")}, "must be between"),
    ],
)
def test_create_fixed_asset_validation(fixed_asset_service, kwargs, message):
    fields = {
        "name": "Sondir Rig",
        "acquisition_date": date(2024, 1, 1),
        "value": Decimal("1000"),
        "useful_life_years": 5,
    }
    fields.update(kwargs)
    with pytest.raises(ValidationError, match=message):
        fixed_asset_service.create_fixed_asset(**fields)


def test_register_and_list(fixed_asset_service):
    first = fixed_asset_service.create_fixed_asset(
        "Boring Rig", date(2023, 1, 1), Decimal("300000000"), 8, category="Equipment"
    )
    fixed_asset_service.create_fixed_asset("Pickup Truck", date(2024, 3, 1), Decimal("250000000"), 8)

    asset = fixed_asset_service.get_fixed_asset(first)
    assert asset.category == "Equipment"
    assert asset.book_value == Decimal("300000000.00")
    assert [a.name for a in fixed_asset_service.list_fixed_assets()] == ["Boring Rig", "Pickup Truck"]
    assert [a.name for a in fixed_asset_service.list_fixed_assets(as_of=date(2023, 12, 31))] == [
        "Boring Rig"
    ]


def test_apply_depreciation_updates_book_value(fixed_asset_service):
    asset_id = fixed_asset_service.create_fixed_asset(
        "Office Laptop", date(2023, 1, 1), Decimal("36525000"), 10
    )

    fixed_asset_service.apply_depreciation(asset_id, date(2024, 1, 1))

    asset = fixed_asset_service.get_fixed_asset(asset_id)
    assert asset.accumulated_depreciation == Decimal("3650000.00")
    assert asset.book_value == Decimal("32875000.00")


def test_apply_depreciation_all(fixed_asset_service):
    older = fixed_asset_service.create_fixed_asset("Rig", date(2020, 1, 1), Decimal("1000"), 2)
    fixed_asset_service.create_fixed_asset("Truck", date(2025, 1, 1), Decimal("1000"), 2)

    results = fixed_asset_service.apply_depreciation_all(date(2024, 1, 1))

    assert list(results) == [older]
    assert results[older].is_fully_depreciated
    assert fixed_asset_service.get_fixed_asset(older).book_value == Decimal("0.00")


def test_depreciation_of_missing_asset(fixed_asset_service):
    with pytest.raises(NotFoundError, match="Fixed asset 9 not found"):
        fixed_asset_service.depreciation_of(9, date(2024, 1, 1))


class TestDepreciationSchedule:
    """Year-by-year depreciation schedules."""

    def test_partial_first_year(self):
        """Test a mid-year acquisition is charged from its month and finishes a year later."""
        rows = build_depreciation_schedule(Decimal("12000000"), date(2024, 7, 15), 3)

        assert [row.year for row in rows] == [2024, 2025, 2026, 2027]
        assert [row.depreciation for row in rows] == [
            Decimal("2000000.00"),
            Decimal("4000000.00"),
            Decimal("4000000.00"),
            Decimal("2000000.00"),
        ]
        assert [row.percent_of_year for row in rows] == [
            Decimal("50.00"),
            Decimal("100.00"),
            Decimal("100.00"),
            Decimal("50.00"),
        ]
        assert rows[1].beginning_value == Decimal("10000000.00")
        assert rows[1].accumulated_depreciation == Decimal("6000000.00")
        assert rows[-1].ending_value == Decimal("0")

    def test_january_acquisition_spans_useful_life(self):
        rows = build_depreciation_schedule(Decimal("9000000"), date(2024, 1, 5), 3)

        assert [row.year for row in rows] == [2024, 2025, 2026]
        assert all(row.depreciation == Decimal("3000000.00") for row in rows)

    def test_rounding_never_adds_a_year(self):
        rows = build_depreciation_schedule(Decimal("1000"), date(2024, 1, 1), 3)

        assert [row.depreciation for row in rows] == [
            Decimal("333.33"),
            Decimal("333.34"),
            Decimal("333.33"),
        ]
        assert sum(row.depreciation for row in rows) == Decimal("1000")
        assert all(row.ending_value >= 0 for row in rows)

    def test_requires_positive_life(self):
        with pytest.raises(ValidationError, match="Useful life must be positive"):
            build_depreciation_schedule(Decimal("1000"), date(2024, 1, 1), 0)

    def test_schedule_of_registered_asset(self, fixed_asset_service):
        asset_id = fixed_asset_service.create_fixed_asset(
            "Boring Rig", date(2023, 10, 1), Decimal("8000000"), 2
        )

        rows = fixed_asset_service.depreciation_schedule(asset_id)

        assert [row.year for row in rows] == [2023, 2024, 2025]
        assert rows[0].depreciation == Decimal("1000000.00")
        assert rows[-1].accumulated_depreciation == Decimal("8000000.00")

    def test_schedule_of_missing_asset(self, fixed_asset_service):
        with pytest.raises(NotFoundError):
            fixed_asset_service.depreciation_schedule(9)
