"""Location name → path label normalization.

Labels match [a-z0-9_]+ so they are valid ltree labels and safe inside a
dot-separated materialized path. Deterministic, no I/O.
"""

import re
import unicodedata

# Letters that do not decompose into base + combining mark under NFKD.
_TRANSLITERATIONS = str.maketrans({
    "ł": "l", "Ł": "L",
    "đ": "d", "Đ": "D",
    "ð": "d", "Ð": "D",
    "ø": "o", "Ø": "O",
    "ħ": "h", "Ħ": "H",
    "ı": "i",
    "ß": "ss",
    "æ": "ae", "Æ": "AE",
    "œ": "oe", "Œ": "OE",
    "þ": "th", "Þ": "TH",
})

_NON_LABEL = re.compile(r"[^a-z0-9]+")


def fold_to_ascii(text: str) -> str:
    """Strip diacritics and transliterate common non-ASCII Latin letters.

    Characters with no ASCII counterpart are dropped.
    """
    text = text.translate(_TRANSLITERATIONS)
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).encode(
        "ascii", "ignore"
    ).decode("ascii")


def slugify(display_name: str) -> str:
    """Normalize a display name into a path label.

    - Fold to ASCII (``"Garaż"`` → ``"Garaz"``)
    - Lowercase
    - Collapse every run of non-alphanumerics into one underscore
    - Strip leading/trailing underscores

    May return ``""`` (e.g. for ``"!!!"``); callers treat that as invalid input.

    >>> slugify("Top Shelf")
    'top_shelf'
    >>> slugify("Półka #1")
    'polka_1'
    """
    folded = fold_to_ascii(display_name).lower()
    return _NON_LABEL.sub("_", folded).strip("_")
