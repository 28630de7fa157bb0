"""Insured-product catalog index with normalized (institution, product) lookup"""

import re
from typing import FrozenSet, Iterable, Tuple

from safebank_router.domain.models import CatalogEntry

_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[(){}\[\]·,\-_/]")


def normalize_name(value: str | None) -> str:
    """
    Normalize an institution or product name for catalog matching.

    Lower-cases, removes all whitespace and strips the punctuation that
    drifts between the KDIC feed and account data.

    Example:
        "KB 국민은행 (정기예금)" -> "kb국민은행정기예금"
    """
    text = _WHITESPACE.sub("", str(value or "").lower())
    return _PUNCTUATION.sub("", text)


def catalog_key(institution: str | None, product_name: str | None) -> str:
    return f"{normalize_name(institution)}|{normalize_name(product_name)}"


class CatalogIndex:
    """Immutable set of insured (institution, product) keys"""

    __slots__ = ("_keys",)

    def __init__(self, keys: Iterable[str] = ()):
        self._keys: FrozenSet[str] = frozenset(keys)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, str]]) -> "CatalogIndex":
        keys = set()
        for institution, product_name in pairs:
            institution = (institution or "").strip()
            product_name = (product_name or "").strip()
            # Pairs that are blank after trimming never enter the index
            if institution and product_name:
                keys.add(catalog_key(institution, product_name))
        return cls(keys)

    @classmethod
    def from_entries(cls, entries: Iterable[CatalogEntry]) -> "CatalogIndex":
        return cls.from_pairs((e.institution, e.product_name) for e in entries)

    def contains(self, institution: str | None, product_name: str | None) -> bool:
        return catalog_key(institution, product_name) in self._keys

    def __contains__(self, pair: Tuple[str, str]) -> bool:
        return self.contains(*pair)

    def __len__(self) -> int:
        return len(self._keys)
