"""
Cable attribute extraction from free-text item descriptions.

Inventory exports carry only a human-written item name such as
``"400G AOC 7M QSFP-DD"``. This module pulls out the structured facts the
catalog stores about a cable:

- length (value + unit, ``M`` or ``FT``)
- speed (``100G``, ``200G``, ``400G``, ``800G``)
- physical cable type (``AOC``, ``PSM4``, ``DR4``, ``DAC``, ``Copper``)
- connector (``QSFP-DD``, ``QSFP28``, ``OSFP``, ``MPO``, ``RJ45``)

Extraction is best-effort and total: anything not recognised is ``None``,
nothing raises. The functions are pure and deterministic, since they are
re-run on every import and the catalog's coalescing merge relies on the
same text always yielding the same attributes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

# Ordered length patterns; the first one that matches wins.
#   1. number+unit bounded by dashes/whitespace on both sides:  "AOC 7M QSFP"
#   2. strictly dash-delimited:                                 "AOC-7M-QSFP"
#   3. number+unit at the very end of the text:                 "PATCHCORD 2FT"
LENGTH_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"[-\s](\d+(?:\.\d+)?)\s*(M|FT)[-\s]", re.IGNORECASE),
    re.compile(r"-(\d+(?:\.\d+)?)(M|FT)-", re.IGNORECASE),
    re.compile(r"[-\s](\d+(?:\.\d+)?)\s*(M|FT)$", re.IGNORECASE),
)

SPEED_PATTERN = re.compile(r"(100G|200G|400G|800G)", re.IGNORECASE)

# Priority order matters: the first matching entry is returned.
CABLE_TYPE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("AOC", re.compile(r"\bAOC\b", re.IGNORECASE)),
    ("PSM4", re.compile(r"\bPSM4?\b", re.IGNORECASE)),
    ("DR4", re.compile(r"\bDR4\+?\b", re.IGNORECASE)),
    ("DAC", re.compile(r"\bDAC\b", re.IGNORECASE)),
    ("Copper", re.compile(r"\b(?:CAT6|COPPER)\b", re.IGNORECASE)),
)

# QSFP-DD must be tried before any looser QSFP form.
CONNECTOR_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("QSFP-DD", re.compile(r"QSFP-DD", re.IGNORECASE)),
    ("QSFP28", re.compile(r"QSFP28", re.IGNORECASE)),
    ("OSFP", re.compile(r"\bOSFP\b", re.IGNORECASE)),
    ("MPO", re.compile(r"\bMPO\b", re.IGNORECASE)),
    ("RJ45", re.compile(r"\bRJ45\b", re.IGNORECASE)),
)

SHORT_NAME_MAX_LENGTH = 40


@dataclass(frozen=True)
class CableLength:
    """A parsed cable length."""

    value: float
    unit: str

    @property
    def display(self) -> str:
        """Compact form used in the catalog, e.g. ``7M`` or ``2.5FT``."""
        return f"{self.value:g}{self.unit}"


@dataclass(frozen=True)
class CableAttributes:
    """Structured attributes extracted from one item description."""

    length_value: Optional[float] = None
    length_unit: Optional[str] = None
    speed: Optional[str] = None
    cable_type: Optional[str] = None
    connector_type: Optional[str] = None

    @property
    def length_display(self) -> Optional[str]:
        if self.length_value is None or self.length_unit is None:
            return None
        return CableLength(self.length_value, self.length_unit).display


def extract_length(text: str) -> Optional[CableLength]:
    """Return the first length token found in ``text``, or None."""
    for pattern in LENGTH_PATTERNS:
        match = pattern.search(text)
        if match:
            return CableLength(value=float(match.group(1)), unit=match.group(2).upper())
    return None


def extract_speed(text: str) -> Optional[str]:
    """Return the first speed token (upper-cased), or None."""
    match = SPEED_PATTERN.search(text)
    return match.group(1).upper() if match else None


def _first_keyword(text: str, patterns: tuple[tuple[str, re.Pattern[str]], ...]) -> Optional[str]:
    for label, pattern in patterns:
        if pattern.search(text):
            return label
    return None


def extract_cable_type(text: str) -> Optional[str]:
    """Return the highest-priority physical cable type mentioned, or None."""
    return _first_keyword(text, CABLE_TYPE_PATTERNS)


def extract_connector(text: str) -> Optional[str]:
    """Return the highest-priority connector mentioned, or None."""
    return _first_keyword(text, CONNECTOR_PATTERNS)


def extract_cable_attributes(text: str) -> CableAttributes:
    """
    Extract every supported attribute from an item description.

    Args:
        text: Free-text item description, e.g. ``"400G AOC 7M QSFP-DD"``

    Returns:
        CableAttributes with ``None`` for each attribute not recognised
    """
    text = text or ""
    length = extract_length(text)
    return CableAttributes(
        length_value=length.value if length else None,
        length_unit=length.unit if length else None,
        speed=extract_speed(text),
        cable_type=extract_cable_type(text),
        connector_type=extract_connector(text),
    )


def describe_cable(
    item_name: str,
    attributes: Optional[CableAttributes] = None,
) -> str:
    """
    Build a short human-readable label for a cable.

    Known attributes are joined as ``"<length> - <speed> - <type>"``. When
    none are known, the first three dash-separated tokens of the item name
    are used instead, truncated to 40 characters.
    """
    if attributes is None:
        attributes = extract_cable_attributes(item_name)

    parts = [
        part
        for part in (attributes.length_display, attributes.speed, attributes.cable_type)
        if part
    ]
    if parts:
        return " - ".join(parts)

    short_name = "-".join(item_name.split("-")[:3])
    if len(short_name) > SHORT_NAME_MAX_LENGTH:
        return short_name[:SHORT_NAME_MAX_LENGTH] + "..."
    return short_name
