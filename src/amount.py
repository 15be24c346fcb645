from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

DECIMAL_PLACES = 4
SCALE = 10 ** DECIMAL_PLACES

# Scaled values must fit a signed 64-bit integer.
MAX_UNITS = 2 ** 63 - 1
MIN_UNITS = -(2 ** 63)


class InvalidAmountError(ValueError):
    pass


@dataclass(frozen=True, order=True)
class Amount:
    """
    Monetary quantity stored as an integer number of 1/10000 units.
    All ledger arithmetic stays in integers; Decimal is only used at the edges.
    """

    units: int = 0

    @classmethod
    def zero(cls) -> "Amount":
        return cls(0)

    @classmethod
    def parse(cls, text: str) -> "Amount":
        """Parse decimal text such as "1.2345" into a fixed-point amount."""
        try:
            value = Decimal(text.strip())
        except InvalidOperation:
            raise InvalidAmountError(f"not a decimal number: {text!r}")

        if not value.is_finite():
            raise InvalidAmountError(f"not a finite number: {text!r}")

        # Scale with plain integers: Decimal.scaleb rounds, overflows or
        # underflows to zero once the exponent leaves the context limits.
        sign, digits, exponent = value.as_tuple()
        coefficient = "".join(str(digit) for digit in digits)
        significant = coefficient.rstrip("0")
        if not significant:
            return cls(0)
        exponent += len(coefficient) - len(significant)

        if exponent < -DECIMAL_PLACES:
            raise InvalidAmountError(f"more than {DECIMAL_PLACES} decimal places: {text!r}")
        if len(significant) + exponent + DECIMAL_PLACES > len(str(MAX_UNITS)):
            raise InvalidAmountError(f"out of range: {text!r}")

        units = int(significant) * 10 ** (exponent + DECIMAL_PLACES)
        if sign:
            units = -units
        if not MIN_UNITS <= units <= MAX_UNITS:
            raise InvalidAmountError(f"out of range: {text!r}")
        return cls(units)

    def to_decimal(self) -> Decimal:
        return Decimal(self.units).scaleb(-DECIMAL_PLACES)

    def is_zero(self) -> bool:
        return self.units == 0

    def is_negative(self) -> bool:
        return self.units < 0

    def __add__(self, other: "Amount") -> "Amount":
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(self.units + other.units)

    def __sub__(self, other: "Amount") -> "Amount":
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(self.units - other.units)

    def __str__(self) -> str:
        sign = "-" if self.units < 0 else ""
        whole, fraction = divmod(abs(self.units), SCALE)
        fraction_digits = f"{fraction:0{DECIMAL_PLACES}d}".rstrip("0") or "0"
        return f"{sign}{whole}.{fraction_digits}"

    def __repr__(self) -> str:
        return f"Amount({self})"
