"""Generate hyphen/underscore spellings of a crate name.

The registry treats ``-`` and ``_`` as distinct characters, but users do
not, so lookups probe every spelling. Only the first
``Constants.FUZZY_MAX_SEPARATORS`` separators are toggled, which bounds the
number of variants at 1024; any separators after that are kept as written.
"""
from __future__ import annotations

import logging
from typing import List

from crategate.constants import Constants

logger = logging.getLogger(__name__)

SEPARATORS = ("-", "_")


def gen_fuzzy_crate_names(crate_name: str) -> List[str]:
    """Generate all similar crate names, exact name first.

    Examples:

    | input            | output                                                         |
    | ---------------- | -------------------------------------------------------------- |
    | cargo            | cargo                                                          |
    | cargo-edit       | cargo-edit, cargo_edit                                         |
    | parking_lot_core | parking_lot_core, parking-lot_core, parking_lot-core, ...      |

    Variant i sets position j to ``-`` when bit j of i is 1, ``_`` otherwise.

    Args:
        crate_name: Name as typed by the user.

    Returns:
        list: 2**k distinct names, k being the number of toggled separators.
    """
    positions = [i for i, ch in enumerate(crate_name) if ch in SEPARATORS]
    if len(positions) > Constants.FUZZY_MAX_SEPARATORS:
        logger.debug(
            "Crate name %s has %d separators; only the first %d are fuzzed",
            crate_name, len(positions), Constants.FUZZY_MAX_SEPARATORS,
        )
        positions = positions[:Constants.FUZZY_MAX_SEPARATORS]
    if not positions:
        return [crate_name]

    chars = list(crate_name)
    names = []
    for mask in range(2 ** len(positions)):
        for bit, pos in enumerate(positions):
            chars[pos] = "-" if (mask >> bit) & 1 else "_"
        names.append("".join(chars))

    if crate_name in names:
        idx = names.index(crate_name)
        names[0], names[idx] = names[idx], names[0]
    return names
