"""
Decimal and Money Utilities
===========================

Consistent Decimal conversion and Rupiah display formatting
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP


class MoneyCalculator:
    """
    Money helpers for Rupiah amounts

    Usage:
        MoneyCalculator.to_decimal('1500000')          # Decimal('1500000')
        MoneyCalculator.round_rupiah(Decimal('12.5'))  # Decimal('13')
        MoneyCalculator.format_rupiah(1500000)         # 'Rp 1.500.000'
    """

    WHOLE_UNITS = Decimal('1')

    @staticmethod
    def to_decimal(value, default=Decimal('0')):
        """
        Convert int/float/str/Decimal to Decimal

        None and empty strings become `default`; anything else that does not
        parse raises ValueError.
        """
        if value is None or value == '':
            return default
        if isinstance(value, Decimal):
            return value
        try:
            return Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValueError(f"Invalid amount: {value!r}")

    @staticmethod
    def round_rupiah(amount):
        """Round to whole Rupiah for display"""
        return MoneyCalculator.to_decimal(amount).quantize(
            MoneyCalculator.WHOLE_UNITS, rounding=ROUND_HALF_UP
        )

    @staticmethod
    def format_rupiah(amount):
        """
        Indonesian currency formatting

        Example:
            >>> MoneyCalculator.format_rupiah(Decimal('1234567.6'))
            'Rp 1.234.568'
        """
        rounded = MoneyCalculator.round_rupiah(amount)
        sign = '-' if rounded < 0 else ''
        grouped = f"{abs(int(rounded)):,}".replace(',', '.')
        return f"{sign}Rp {grouped}"

    @staticmethod
    def safe_percentage(part, whole, places=2):
        """part / whole * 100 rounded to `places`, 0 when whole is 0"""
        if not whole:
            return 0.0
        return round(float(part) / float(whole) * 100, places)


def to_decimal(value, default=Decimal('0')):
    return MoneyCalculator.to_decimal(value, default)


def format_rupiah(amount):
    return MoneyCalculator.format_rupiah(amount)
