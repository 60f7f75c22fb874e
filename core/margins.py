"""Victory-margin tiers.

The tier boundaries widened partway through the tournament, so the table is
keyed by the first match id each definition applies to. Lookup picks the
last entry whose threshold the match id reaches.
"""

NARROW_TIERS = {
    "A": "0-10 runs / 4 or less balls remaining",
    "B": "11-20 runs / 5-9 balls remaining",
    "C": "21-35 runs / 10-14 balls remaining",
    "D": "36+ runs / 15+ balls remaining",
}

WIDE_TIERS = {
    "A": "0-15 runs / 6 or less balls remaining",
    "B": "16-30 runs / 7-12 balls remaining",
    "C": "31-50 runs / 13-20 balls remaining",
    "D": "51+ runs / 21+ balls remaining",
}

WIDE_TIERS_FROM_MATCH = 21

# (threshold_match_id, tiers), ascending by threshold
MARGIN_TABLE: tuple[tuple[int, dict[str, str]], ...] = (
    (0, NARROW_TIERS),
    (WIDE_TIERS_FROM_MATCH, WIDE_TIERS),
)


def match_number(match_id: str) -> int | None:
    """Return the numeric value of a match id, or None if it isn't numeric."""
    try:
        return int(str(match_id).strip())
    except ValueError:
        return None


def margin_options_for(match_id: str) -> dict[str, str]:
    """Return the ordered tier key -> description mapping for a match.

    Non-numeric match ids get the first (narrowest) definition.
    """
    number = match_number(match_id)
    tiers = MARGIN_TABLE[0][1]
    if number is not None:
        for threshold, definition in MARGIN_TABLE:
            if number >= threshold:
                tiers = definition
    return dict(tiers)
