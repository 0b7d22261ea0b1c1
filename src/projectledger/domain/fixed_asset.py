"""Fixed asset register and straight-line depreciation."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from projectledger.database.base import Database
from projectledger.domain.entities import Depreciation, DepreciationYear, FixedAsset
from projectledger.domain.errors import NotFoundError, ValidationError, fixed_asset_not_found

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = Decimal("365.25")
CENTS = Decimal("0.01")
HUNDRED = Decimal("100")


def calculate_depreciation(
    value: Decimal, acquisition_date: date, useful_life_years: int, as_of: date
) -> Depreciation:
    """Straight-line depreciation of an asset as of a date.

    Depreciation accrues daily at value / useful life / 365.25. Accumulated
    depreciation never exceeds the value, so book value never goes below zero.
    """
    if useful_life_years <= 0:
        raise ValidationError(f"Useful life must be positive, got {useful_life_years}")

    per_year = value / useful_life_years
    per_day = per_year / DAYS_PER_YEAR
    days_elapsed = max((as_of - acquisition_date).days, 0)

    accumulated = min((per_day * days_elapsed).quantize(CENTS), value)
    book_value = max(value - accumulated, Decimal("0"))
    return Depreciation(
        original_value=value,
        depreciation_per_year=per_year.quantize(CENTS),
        depreciation_per_month=(per_year / 12).quantize(CENTS),
        days_elapsed=days_elapsed,
        accumulated_depreciation=accumulated,
        book_value=book_value,
        is_fully_depreciated=accumulated >= value,
    )


def build_depreciation_schedule(
    value: Decimal, acquisition_date: date, useful_life_years: int
) -> list[DepreciationYear]:
    """Year-by-year straight-line schedule until the asset is fully depreciated.

    The acquisition year is charged for the months from the acquisition month
    to December, so the last year carries the remainder. Ending value never
    drops below zero.
    """
    if useful_life_years <= 0:
        raise ValidationError(f"Useful life must be positive, got {useful_life_years}")

    annual = value / useful_life_years
    years_elapsed = Decimal(13 - acquisition_date.month) / 12
    year = acquisition_date.year
    book_value = value
    accumulated = Decimal("0")
    schedule = []

    while book_value > 0:
        # Charges are differences of rounded cumulative totals, so they sum to value.
        target = min((annual * years_elapsed).quantize(CENTS), value)
        charge = target - accumulated
        accumulated = target
        schedule.append(
            DepreciationYear(
                year=year,
                beginning_value=book_value,
                depreciation=charge,
                accumulated_depreciation=accumulated,
                ending_value=book_value - charge,
                percent_of_year=(charge / annual * HUNDRED).quantize(CENTS),
            )
        )
        book_value -= charge
        year += 1
        years_elapsed += 1
    return schedule


class FixedAssetService:
    """Service for the fixed asset register."""

    def __init__(self, db: Database):
        """Initialize fixed asset service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_fixed_asset(
        self,
        name: str,
        acquisition_date: date,
        value: Decimal,
        useful_life_years: int,
        category: Optional[str] = None,
        accumulated_depreciation: Decimal = Decimal("0"),
    ) -> int:
        """Register a fixed asset.

        Returns:
            Asset ID

        Raises:
            ValidationError: If value, life or accumulated depreciation is invalid
        """
        if not name or not name.strip():
            raise ValidationError("Asset name must not be empty")
        if value <= 0:
            raise ValidationError(f"Asset value must be positive, got {value}")
        if useful_life_years <= 0:
            raise ValidationError(f"Useful life must be positive, got {useful_life_years}")
        if accumulated_depreciation < 0 or accumulated_depreciation > value:
            raise ValidationError(
                f"Accumulated depreciation {accumulated_depreciation} must be between 0 and {value}"
            )

        return self.db.create_fixed_asset(
            name=name.strip(),
            acquisition_date=acquisition_date,
            value=value,
            useful_life_years=useful_life_years,
            category=category,
            accumulated_depreciation=accumulated_depreciation,
        )

    def get_fixed_asset(self, asset_id: int) -> Optional[FixedAsset]:
        return self.db.get_fixed_asset(asset_id)

    def list_fixed_assets(self, as_of: Optional[date] = None) -> list[FixedAsset]:
        """List assets, optionally only those acquired on or before as_of."""
        return self.db.list_fixed_assets(as_of=as_of)

    def depreciation_of(self, asset_id: int, as_of: date) -> Depreciation:
        """Depreciation of a registered asset as of a date, without storing it.

        Raises:
            NotFoundError: If the asset does not exist
        """
        asset = self.db.get_fixed_asset(asset_id)
        if asset is None:
            raise NotFoundError(fixed_asset_not_found(asset_id))
        return calculate_depreciation(asset.value, asset.acquisition_date, asset.useful_life_years, as_of)

    def depreciation_schedule(self, asset_id: int) -> list[DepreciationYear]:
        """Year-by-year depreciation schedule of a registered asset.

        Raises:
            NotFoundError: If the asset does not exist
        """
        asset = self.db.get_fixed_asset(asset_id)
        if asset is None:
            raise NotFoundError(fixed_asset_not_found(asset_id))
        return build_depreciation_schedule(asset.value, asset.acquisition_date, asset.useful_life_years)

    def apply_depreciation(self, asset_id: int, as_of: date) -> Depreciation:
        """Store the asset's accumulated depreciation as of a date.

        Raises:
            NotFoundError: If the asset does not exist
        """
        depreciation = self.depreciation_of(asset_id, as_of)
        self.db.update_accumulated_depreciation(asset_id, depreciation.accumulated_depreciation)
        logger.info(
            "Asset %d depreciated to %s as of %s",
            asset_id,
            depreciation.accumulated_depreciation,
            as_of.isoformat(),
        )
        return depreciation

    def apply_depreciation_all(self, as_of: date) -> dict[int, Depreciation]:
        """Store accumulated depreciation for every asset acquired by as_of."""
        with self.db.atomic():
            return {
                asset.id: self.apply_depreciation(asset.id, as_of)
                for asset in self.db.list_fixed_assets(as_of=as_of)
            }
