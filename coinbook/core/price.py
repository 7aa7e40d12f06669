"""Fixed-point price keys.

Exchanges quote prices as decimal strings ("42.003", "42.00300000"). Using
floats as book keys makes two spellings of the same price land on different
levels, so prices are parsed into an integer count of millionths instead.
Only the display helpers go through float.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import PriceParseError

DECIMALS = 6
SCALE = 10**DECIMALS


@dataclass(frozen=True, order=True, slots=True)
class PriceKey:
    units: int  # millionths of the quote unit

    @classmethod
    def parse(cls, text: str) -> "PriceKey":
        """Parse an unsigned decimal string with at most 6 significant decimals.

        Extra fractional digits are accepted only when they are all zero;
        anything that would be truncated raises PriceParseError.
        """
        int_part = 0
        frac_part = 0
        frac_digits = 0
        seen_dot = False
        seen_digit = False
        for ch in text:
            if ch == ".":
                if seen_dot:
                    raise PriceParseError(text, "more than one decimal point")
                seen_dot = True
                continue
            if not ("0" <= ch <= "9"):
                raise PriceParseError(text, f"unexpected character {ch!r}")
            seen_digit = True
            digit = ord(ch) - ord("0")
            if not seen_dot:
                int_part = 10 * int_part + digit
            elif frac_digits < DECIMALS:
                frac_part = 10 * frac_part + digit
                frac_digits += 1
            elif digit != 0:
                raise PriceParseError(text, "too many digits")
        if not seen_digit:
            raise PriceParseError(text, "no digits")
        frac_part *= 10 ** (DECIMALS - frac_digits)
        return cls(int_part * SCALE + frac_part)

    @classmethod
    def from_units(cls, units: int) -> "PriceKey":
        if units < 0:
            raise ValueError(f"price units must be non-negative, got {units}")
        return cls(int(units))

    def to_float(self) -> float:
        return self.units / SCALE

    def __float__(self) -> float:
        return self.to_float()

    def __str__(self) -> str:
        return repr(self.to_float())

    def __repr__(self) -> str:
        return f"PriceKey({self.to_float()!r})"
