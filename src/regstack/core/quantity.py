# src/regstack/core/quantity.py
"""Resource-quantity literals.

Grammar (the Kubernetes quantity format):

    quantity  ::= sign? number suffix?
    number    ::= digits ( "." digits? )? | "." digits
    suffix    ::= binarySI | decimalSI | decimalExponent
    binarySI  ::= Ki | Mi | Gi | Ti | Pi | Ei
    decimalSI ::= n | u | m | k | M | G | T | P | E
    decimalExponent ::= ( e | E ) sign? digits

Values are held as exact Decimals so "1Gi" and "1024Mi" compare equal.

Usage:
    from regstack.core.quantity import parse_quantity

    size = parse_quantity("10Gi")
    assert size > parse_quantity("500Mi")
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import total_ordering

from regstack.contracts.errors import QuantityParseError

_BINARY_SUFFIXES: dict[str, int] = {
    "Ki": 2**10,
    "Mi": 2**20,
    "Gi": 2**30,
    "Ti": 2**40,
    "Pi": 2**50,
    "Ei": 2**60,
}

_DECIMAL_SUFFIXES: dict[str, Decimal] = {
    "n": Decimal("1e-9"),
    "u": Decimal("1e-6"),
    "m": Decimal("1e-3"),
    "": Decimal(1),
    "k": Decimal("1e3"),
    "M": Decimal("1e6"),
    "G": Decimal("1e9"),
    "T": Decimal("1e12"),
    "P": Decimal("1e15"),
    "E": Decimal("1e18"),
}

# Exponent alternative is tried first so "1E3" is 1000, while a bare "1E" is one exa.
_QUANTITY_PATTERN = re.compile(
    r"(?P<sign>[+-]?)"
    r"(?P<number>\d+(?:\.\d*)?|\.\d+)"
    r"(?P<suffix>[eE][+-]?\d+|Ki|Mi|Gi|Ti|Pi|Ei|[numkMGTPE])?"
)


@total_ordering
@dataclass(frozen=True, slots=True, eq=False)
class Quantity:
    """A parsed resource quantity.

    Equality and ordering use the numeric value only; ``literal`` keeps the
    caller's spelling for messages and round-tripping into manifests.
    """

    value: Decimal
    literal: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Quantity):
            return NotImplemented
        return self.value == other.value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Quantity):
            return NotImplemented
        return self.value < other.value

    def __hash__(self) -> int:
        return hash(self.value)

    def __str__(self) -> str:
        return self.literal


def parse_quantity(literal: str) -> Quantity:
    """Parse a quantity literal such as ``10Gi``, ``500M`` or ``1.5e3``.

    Args:
        literal: The size literal. Surrounding whitespace is not accepted.

    Returns:
        Parsed Quantity

    Raises:
        QuantityParseError: If the literal is empty or does not match the grammar
    """
    if not literal:
        raise QuantityParseError(literal, "quantities must not be empty")

    match = _QUANTITY_PATTERN.fullmatch(literal)
    if match is None:
        raise QuantityParseError(
            literal,
            f"quantities must match the regular expression '^([+-]?[0-9.]+)([eEinumkKMGTP]*[-+]?[0-9]*)$': {literal!r}",
        )

    try:
        number = Decimal(match.group("number"))
    except InvalidOperation as e:
        raise QuantityParseError(literal, f"invalid numeric part in quantity {literal!r}") from e

    suffix = match.group("suffix") or ""
    if suffix in _BINARY_SUFFIXES:
        multiplier = Decimal(_BINARY_SUFFIXES[suffix])
    elif suffix in _DECIMAL_SUFFIXES:
        multiplier = _DECIMAL_SUFFIXES[suffix]
    else:
        # Decimal exponent: e3, E-2, e+6
        multiplier = Decimal(10) ** int(suffix[1:])

    value = number * multiplier
    if match.group("sign") == "-":
        value = -value

    return Quantity(value=value, literal=literal)
