# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Locale-aware string ordering for display names and instance names.
Backed by the Unicode Collation Algorithm (pyuca, DUCET table), so kana of
both scripts interleave in gojuon order and accented latin sorts beside its
base letter.
"""

from pyuca import Collator

_collator = Collator()


def collation_key(text: str | None) -> tuple[tuple[int, ...], str]:
    """
    Sort key: the collation weights, then the raw string so that strings the
    collator considers equal still have a total order.
    """
    raw = text or ""
    return _collator.sort_key(raw), raw


def compare_text(a: str | None, b: str | None) -> int:
    ka, kb = collation_key(a), collation_key(b)
    return (ka > kb) - (ka < kb)
