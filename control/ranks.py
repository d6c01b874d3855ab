"""
control/ranks.py
================
Road rank classifier.

Maps a road's ``highway`` classification tag to an integer rank; higher
numbers are higher rank roads.  Missing tags rank 0.  An unknown tag is
corrupt or unsupported input and raises :class:`ClassificationError`
rather than being defaulted.
"""

from __future__ import annotations

from typing import Dict, Optional

from control.errors import ClassificationError

RANKS: Dict[str, int] = {
    "motorway": 20,
    "motorway_link": 19,

    "trunk": 17,
    "trunk_link": 16,

    "primary": 15,
    "primary_link": 14,

    "secondary": 13,
    "secondary_link": 12,

    "tertiary": 10,
    "tertiary_link": 9,

    "residential": 5,

    "footway": 1,

    "unclassified": 0,
    "road": 0,
}


def road_rank(highway: Optional[str]) -> int:
    """Rank of a road given its classification tag.

    Parameters
    ----------
    highway : str or None
        Classification tag, e.g. ``"primary"``.  ``None`` or an empty
        string means the road is untagged.

    Raises
    ------
    ClassificationError
        If *highway* is a non-empty tag missing from :data:`RANKS`.
    """
    if not highway:
        return 0
    try:
        return RANKS[highway]
    except KeyError:
        raise ClassificationError(highway) from None
