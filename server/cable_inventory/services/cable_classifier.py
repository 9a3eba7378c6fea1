"""
Cable category classification.

Every catalog entry is filed under one label of a closed taxonomy. The
decision is an ordered rule table over the upper-cased item description:
rules are evaluated top to bottom and the first one that matches decides
the category; later rules are never consulted. The order is the tie-break
policy for ambiguous descriptions (a description mentioning both ``AOC``
and ``PSM4`` is an AOC because the AOC rules come first), so reordering
``CLASSIFICATION_RULES`` changes outcomes.

When no rule matches, the export's item group is mapped to a category;
anything else is ``Other``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable


class CableCategory(str, enum.Enum):
    """The closed set of inventory categories, in display order."""

    AOC_400G = "400G AOC"
    PSM_400G = "400G PSM"
    AOC_100G = "100G AOC"
    PSM4_100G = "100G PSM4"
    SMLC = "SMLC"
    COPPER = "Copper"
    Y_AOC_200G = "200G Y AOC"
    MTP_FIBER = "MTP Fiber"
    FIBER_JUMPERS = "Fiber Jumpers"
    TRANSCEIVER = "Transceiver"
    OTHER = "Other"


@dataclass(frozen=True)
class ClassificationInput:
    """What a rule gets to look at."""

    text: str  # upper-cased description
    item_group: str

    def has(self, *tokens: str) -> bool:
        """True if every token occurs in the description."""
        return all(token in self.text for token in tokens)

    def has_any(self, *tokens: str) -> bool:
        """True if at least one token occurs in the description."""
        return any(token in self.text for token in tokens)


@dataclass(frozen=True)
class ClassificationRule:
    category: CableCategory
    matches: Callable[[ClassificationInput], bool]


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    # 400G AOCs; DR4 parts belong to 400G PSM
    ClassificationRule(
        CableCategory.AOC_400G,
        lambda c: c.has("400G", "AOC") and not c.has("DR4"),
    ),
    # 400G DR4 transceivers and pigtails
    ClassificationRule(
        CableCategory.PSM_400G,
        lambda c: c.has_any("DR4", "400G") and c.has_any("TRANSCEIVER", "PIGTAIL"),
    ),
    # 200G breakout (Y) AOCs
    ClassificationRule(
        CableCategory.Y_AOC_200G,
        lambda c: c.has("200G", "Y", "AOC"),
    ),
    # 100G / QSFP28 AOCs
    ClassificationRule(
        CableCategory.AOC_100G,
        lambda c: c.has_any("100G", "QSFP28") and c.has("AOC") and not c.has("400G"),
    ),
    # 100G PSM4 cables
    ClassificationRule(
        CableCategory.PSM4_100G,
        lambda c: c.has("PSM4") and c.has_any("100G", "QSFP28"),
    ),
    # Single mode LC uniboot jumpers
    ClassificationRule(
        CableCategory.SMLC,
        lambda c: (
            c.has_any("SINGLE MODE", "SM/LC", "SINGLE-MODE")
            and c.has_any("UNIBOOT", "LC")
        ),
    ),
    # MTP/MPO fiber jumpers
    ClassificationRule(
        CableCategory.MTP_FIBER,
        lambda c: c.has("MTP") and c.has_any("JUMPER", "FIBRE", "FIBER"),
    ),
    # CAT6 copper patch cords
    ClassificationRule(
        CableCategory.COPPER,
        lambda c: c.has("CAT6") or c.has("COPPER", "PATCHCORDS"),
    ),
    # Generic fiber jumpers
    ClassificationRule(
        CableCategory.FIBER_JUMPERS,
        lambda c: c.item_group == "FibrJmpers" or c.has_any("FIBER", "FIBRE"),
    ),
)

# Coarse fallback keyed purely on the export's item group.
ITEM_GROUP_CATEGORIES: dict[str, CableCategory] = {
    "PatchCords": CableCategory.COPPER,
    "PSM4 Cable": CableCategory.PSM4_100G,
    "Trnscvr": CableCategory.TRANSCEIVER,
    "FibrJmpers": CableCategory.FIBER_JUMPERS,
}


def classify_cable(description: str, item_group: str = "") -> CableCategory:
    """
    Classify an item into a CableCategory.

    Args:
        description: Free-text item description
        item_group: Item group column from the export (matched exactly)

    Returns:
        The category of the first matching rule, else the item-group
        fallback, else ``CableCategory.OTHER``
    """
    subject = ClassificationInput(
        text=(description or "").upper(),
        item_group=(item_group or "").strip(),
    )
    for rule in CLASSIFICATION_RULES:
        if rule.matches(subject):
            return rule.category
    return ITEM_GROUP_CATEGORIES.get(subject.item_group, CableCategory.OTHER)
