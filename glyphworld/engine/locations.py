"""
Location label heuristics.

Location labels are free text of the form
"Specific Room, Structure, Quarter, City, Country". These helpers pull
coarse facts out of them for prose and theming.
"""

from __future__ import annotations

from glyphworld.models.world import WealthTier

OUTDOOR_KEYWORDS = (
    "street",
    "alley",
    "market",
    "courtyard",
    "square",
    "gate",
    "road",
    "path",
    "garden",
    "souk",
)

SOCIAL_CLASS_TIERS: dict[str, WealthTier] = {
    "elite": WealthTier.ELITE,
    "notable": WealthTier.MERCHANT,
    "merchant": WealthTier.MERCHANT,
    "commoner": WealthTier.MODEST,
    "destitute": WealthTier.POOR,
}


def is_outdoor_location(location: str | None) -> bool:
    lowered = (location or "").lower()
    return any(keyword in lowered for keyword in OUTDOOR_KEYWORDS)


def room_name(location: str | None) -> str:
    """The most specific part of a location label."""
    first = (location or "").split(",")[0].strip()
    return first or "the area"


def normalize_wealth_tier(value: str | None) -> WealthTier | None:
    if not value:
        return None
    try:
        return WealthTier(value.strip().lower())
    except ValueError:
        return None


def resolve_wealth_tier(
    location_wealth: str | None = None,
    house_type: str | None = None,
    social_class: str | None = None,
    location: str | None = None,
) -> WealthTier:
    """Pick a wealth tier from the best available hint.

    Priority: explicit tier, house type, location keywords, social class.
    Defaults to MODEST.
    """
    direct = normalize_wealth_tier(location_wealth)
    if direct:
        return direct

    house = (house_type or "").lower()
    if "merchant" in house:
        return WealthTier.MERCHANT
    if "garden villa" in house:
        return WealthTier.ELITE
    if "cramped" in house or "room in a khan" in house:
        return WealthTier.POOR
    if "small courtyard" in house:
        return WealthTier.MODEST

    loc = (location or "").lower()
    if "souk" in loc or "market" in loc or "khan" in loc:
        return WealthTier.MERCHANT
    if "mosque" in loc or "quarter" in loc:
        return WealthTier.MODEST
    if "gate" in loc or "alley" in loc:
        return WealthTier.POOR

    return SOCIAL_CLASS_TIERS.get((social_class or "").lower(), WealthTier.MODEST)
