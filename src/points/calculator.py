"""Loyalty points calculation for receipts."""

import logging
import math
import re
import sys
from decimal import MAX_EMAX, MIN_EMIN, Context, Decimal, InvalidOperation, localcontext
from typing import Optional, Sequence

from receipts.models import Item, Receipt

logger = logging.getLogger(__name__)

ALPHANUMERIC = re.compile(r'[A-Za-z0-9]')
DAY_PATTERN = re.compile(r'[+-]?[0-9]+')
TIME_PATTERN = re.compile(r'([0-9]{1,2}):([0-9]{2})')
AMOUNT_PATTERN = re.compile(r'[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?')

ROUND_TOTAL_POINTS = 50
QUARTER_MULTIPLE_POINTS = 25
ITEM_PAIR_POINTS = 5
ODD_DAY_POINTS = 6
AFTERNOON_POINTS = 10

QUARTERS_PER_UNIT = 4
DESCRIPTION_PRICE_MULTIPLIER = Decimal('0.2')
AFTERNOON_START_HOUR = 14
AFTERNOON_END_HOUR = 16

# Amounts beyond double range do not parse
MAX_AMOUNT = Decimal(sys.float_info.max)


class PointsCalculator:
    """
    Scores receipts with a fixed set of independent rules.

    Every rule is total: a field that does not parse contributes nothing
    and never raises.
    """

    @staticmethod
    def calculate(receipt: Receipt) -> int:
        """
        Calculate the points awarded for a receipt.

        Args:
            receipt: Validated receipt

        Returns:
            Total points, the sum of all rules
        """
        return (
            PointsCalculator.retailer_points(receipt.retailer)
            + PointsCalculator.total_points(receipt.total)
            + PointsCalculator.item_count_points(receipt.items)
            + sum(PointsCalculator.item_description_points(item) for item in receipt.items)
            + PointsCalculator.purchase_date_points(receipt.purchase_date)
            + PointsCalculator.purchase_time_points(receipt.purchase_time)
        )

    @staticmethod
    def retailer_points(retailer: str) -> int:
        """One point per ASCII letter or digit in the retailer name."""
        return len(ALPHANUMERIC.findall(retailer))

    @staticmethod
    def total_points(total: str) -> int:
        """50 points for a round total, 25 more for a multiple of 0.25."""
        amount = PointsCalculator._parse_amount(total)
        if amount is None:
            logger.debug(f"Skipping total rules, unparsable total: {total!r}")
            return 0

        points = 0
        if amount == amount.to_integral_value():
            points += ROUND_TOTAL_POINTS

        with PointsCalculator._exact_context(amount):
            quarters = amount * QUARTERS_PER_UNIT
        if quarters == quarters.to_integral_value():
            points += QUARTER_MULTIPLE_POINTS
        return points

    @staticmethod
    def item_count_points(items: Sequence[Item]) -> int:
        """5 points for every two items."""
        return (len(items) // 2) * ITEM_PAIR_POINTS

    @staticmethod
    def item_description_points(item: Item) -> int:
        """
        Points for an item whose trimmed description length is a multiple of 3.

        The price is multiplied by 0.2 and rounded up to the nearest integer.
        An empty description counts as a multiple of 3.
        """
        # Length is measured in UTF-8 bytes
        if len(item.short_description.strip().encode('utf-8')) % 3 != 0:
            return 0

        price = PointsCalculator._parse_amount(item.price)
        if price is None:
            logger.debug(f"Skipping description rule, unparsable price: {item.price!r}")
            return 0

        with PointsCalculator._exact_context(price):
            bonus = price * DESCRIPTION_PRICE_MULTIPLIER

        # Negative prices never take points away
        return max(0, math.ceil(bonus))

    @staticmethod
    def purchase_date_points(purchase_date: str) -> int:
        """6 points if the day of the purchase date is odd."""
        parts = purchase_date.split('-')
        if len(parts) != 3 or not DAY_PATTERN.fullmatch(parts[2]):
            logger.debug(f"Skipping date rule, unparsable date: {purchase_date!r}")
            return 0

        day = int(parts[2])
        if day > 0 and day % 2 == 1:
            return ODD_DAY_POINTS
        return 0

    @staticmethod
    def purchase_time_points(purchase_time: str) -> int:
        """10 points if the purchase time is from 14:00 up to but excluding 16:00."""
        hour = PointsCalculator._parse_hour(purchase_time)
        if hour is None:
            logger.debug(f"Skipping time rule, unparsable time: {purchase_time!r}")
            return 0

        if AFTERNOON_START_HOUR <= hour < AFTERNOON_END_HOUR:
            return AFTERNOON_POINTS
        return 0

    @staticmethod
    def _parse_amount(value: str) -> Optional[Decimal]:
        """Parse plain ASCII decimal text, returning None for anything else."""
        if not AMOUNT_PATTERN.fullmatch(value):
            return None

        try:
            amount = Decimal(value)
        except InvalidOperation:
            return None

        if amount.copy_abs() > MAX_AMOUNT:
            return None
        return amount

    @staticmethod
    def _exact_context(amount: Decimal):
        """Decimal context wide enough to multiply amount without rounding."""
        return localcontext(Context(
            prec=len(amount.as_tuple().digits) + 2,
            Emax=MAX_EMAX,
            Emin=MIN_EMIN
        ))

    @staticmethod
    def _parse_hour(value: str) -> Optional[int]:
        """Parse the hour of a 24-hour H:MM or HH:MM time."""
        match = TIME_PATTERN.fullmatch(value)
        if not match:
            return None

        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            return None
        return hour


def calculate_points(receipt: Receipt) -> int:
    """Calculate the points awarded for a receipt."""
    return PointsCalculator.calculate(receipt)
