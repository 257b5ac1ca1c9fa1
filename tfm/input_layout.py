"""Keyboard-layout normalization for key tokens.

Characters typed on a Russian or Ukrainian layout are mapped to the US-QWERTY
key in the same physical position, so ``о`` still moves down like ``j``.
"""

from __future__ import annotations

_US_LOWER = "`qwertyuiop[]asdfghjkl;'zxcvbnm,."
_US_UPPER = '~QWERTYUIOP{}ASDFGHJKL:"ZXCVBNM<>'

_RU_LOWER = "ёйцукенгшщзхъфывапролджэячсмитьбю"
_RU_UPPER = "ЁЙЦУКЕНГШЩЗХЪФЫВАПРОЛДЖЭЯЧСМИТЬБЮ"

# Ukrainian replaces ё ы э ъ with ґ і є ї and has no key for и.
_UA_LOWER = "ґйцукенгшщзхїфівапролджєячсм\0тьбю"
_UA_UPPER = "ҐЙЦУКЕНГШЩЗХЇФІВАПРОЛДЖЄЯЧСМ\0ТЬБЮ"


def _pairs(layout: str, us: str) -> dict[str, str]:
    return {src: dst for src, dst in zip(layout, us) if src != "\0"}


LAYOUT_MAPS: dict[str, dict[str, str]] = {
    "ru": {**_pairs(_RU_LOWER, _US_LOWER), **_pairs(_RU_UPPER, _US_UPPER)},
    "ua": {**_pairs(_UA_LOWER, _US_LOWER), **_pairs(_UA_UPPER, _US_UPPER)},
}

_COMBINED: dict[str, str] = {}
for _mapping in LAYOUT_MAPS.values():
    for _src, _dst in _mapping.items():
        _COMBINED.setdefault(_src, _dst)


def normalize_token(token: str) -> str:
    """Return the US-QWERTY token for a single-character layout token.

    Modified keys (``ctrl+...``) and named keys pass through unchanged.
    """
    if len(token) != 1 or "+" in token:
        return token
    return _COMBINED.get(token, token)


__all__ = ["LAYOUT_MAPS", "normalize_token"]
