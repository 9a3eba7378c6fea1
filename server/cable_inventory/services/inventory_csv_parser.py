"""
Inventory export parser.

Turns a raw CSV export for one datacenter into enriched candidate records:
each accepted row carries the attributes from ``cable_attributes`` and the
category from ``cable_classifier``.

Expected columns (matched after trimming whitespace, case-sensitive):
- MSF (required)
- Item Name (required)
- Item Group
- OnHand Quantity
- Current Location
- Datacenter

Rows missing either required value are dropped silently; partial exports
are normal. Fields beyond the header (trailing commas included) are
ignored. Output preserves source order and does not collapse duplicate
MSFs; the reconciliation pass lets the last occurrence win.
"""

from __future__ import annotations

import csv
import logging
import re
import warnings
from dataclasses import dataclass
from io import StringIO
from typing import Any, Optional, Union

import pandas as pd

from cable_inventory.services.cable_attributes import (
    CableAttributes,
    extract_cable_attributes,
)
from cable_inventory.services.cable_classifier import classify_cable

logger = logging.getLogger(__name__)

MSF_COLUMN = "MSF"
ITEM_NAME_COLUMN = "Item Name"
ITEM_GROUP_COLUMN = "Item Group"
QUANTITY_COLUMN = "OnHand Quantity"
LOCATION_COLUMN = "Current Location"
DATACENTER_COLUMN = "Datacenter"

REQUIRED_COLUMNS = (MSF_COLUMN, ITEM_NAME_COLUMN)

BOM = "\ufeff"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class InventoryParseError(ValueError):
    """Raised when an export cannot be read at all."""


@dataclass(frozen=True)
class ParsedCable:
    """One accepted, enriched row of an inventory export."""

    msf: str
    item_name: str
    item_group: str
    quantity: int
    location: str
    datacenter: str
    category: str
    attributes: CableAttributes

    @property
    def cable_type(self) -> Optional[str]:
        return self.attributes.cable_type

    @property
    def cable_length(self) -> Optional[str]:
        return self.attributes.length_display

    @property
    def cable_length_value(self) -> Optional[float]:
        return self.attributes.length_value

    @property
    def cable_length_unit(self) -> Optional[str]:
        return self.attributes.length_unit

    @property
    def speed(self) -> Optional[str]:
        return self.attributes.speed

    @property
    def connector_type(self) -> Optional[str]:
        return self.attributes.connector_type


def parse_quantity(value: Any) -> int:
    """
    Parse an on-hand quantity.

    Takes the leading integer of the cell ("15", "15.0" and "15 pcs" are all
    15), ignoring thousands separators. Missing, unparsable and negative
    values become 0; a bad quantity never blocks its row.
    """
    if not isinstance(value, str):
        return 0
    match = _LEADING_INT.match(value.replace(",", ""))
    if not match:
        return 0
    return max(int(match.group(1)), 0)


def _cell(row: dict[str, Any], column: str) -> str:
    value = row.get(column)
    return value.strip() if isinstance(value, str) else ""


def _decode(content: Union[bytes, str]) -> str:
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InventoryParseError(f"Inventory export is not valid UTF-8: {e}") from e
    if content.startswith(BOM):
        content = content[len(BOM):]
    return content


def _read_frame(text: str) -> pd.DataFrame:
    # index_col=False: fields are matched to headers by position, so a row
    # with a trailing comma or extra fields never shifts into the wrong
    # columns. Fields beyond the header are dropped.
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", pd.errors.ParserWarning)
        try:
            df = pd.read_csv(
                StringIO(text),
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                index_col=False,
                engine="python",
                quoting=csv.QUOTE_MINIMAL,
            )
        except pd.errors.EmptyDataError:
            return pd.DataFrame()
        except (pd.errors.ParserError, csv.Error) as e:
            raise InventoryParseError(f"Failed to parse inventory export: {e}") from e

    for warning in caught:
        if issubclass(warning.category, pd.errors.ParserWarning):
            logger.warning(
                "Ignored fields beyond the header in inventory export",
                extra={"detail": str(warning.message)},
            )
        else:
            warnings.warn(warning.message, warning.category, stacklevel=2)
    return df


def parse_inventory_csv(content: Union[bytes, str]) -> list[ParsedCable]:
    """
    Parse an inventory export into enriched records.

    Args:
        content: Raw file bytes (UTF-8, optional BOM) or already-decoded text

    Returns:
        Accepted records in order of appearance; empty for an empty,
        header-only or entirely invalid file

    Raises:
        InventoryParseError: If the content cannot be decoded or tokenized
    """
    df = _read_frame(_decode(content))
    df.columns = [str(column).strip() for column in df.columns]

    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        logger.warning(
            "Inventory export is missing required columns",
            extra={"missing_columns": missing, "columns": list(df.columns)},
        )
        return []

    cables: list[ParsedCable] = []
    for row in df.to_dict(orient="records"):
        msf = _cell(row, MSF_COLUMN)
        item_name = _cell(row, ITEM_NAME_COLUMN)
        if not msf or not item_name:
            continue

        item_group = _cell(row, ITEM_GROUP_COLUMN)
        cables.append(
            ParsedCable(
                msf=msf,
                item_name=item_name,
                item_group=item_group,
                quantity=parse_quantity(row.get(QUANTITY_COLUMN)),
                location=_cell(row, LOCATION_COLUMN),
                datacenter=_cell(row, DATACENTER_COLUMN),
                category=classify_cable(item_name, item_group).value,
                attributes=extract_cable_attributes(item_name),
            )
        )

    logger.info(
        "Parsed inventory export",
        extra={"rows_found": len(df), "valid_records": len(cables)},
    )
    return cables
