"""
Totals Aggregator

Reduces food entries to macro totals. Absent numeric fields count as zero so
that nulls never reach a sum.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable

ENTRY_FIELDS = {
    "calories": "calories",
    "protein": "protein_g",
    "carbs": "carbs_g",
    "fat": "fat_g",
    "grams": "grams",
}


@dataclass(frozen=True)
class Totals:
    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fat: int = 0
    grams: int = 0

    @classmethod
    def zero(cls) -> "Totals":
        return cls()

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def _field(entry: Any, name: str) -> int:
    if isinstance(entry, dict):
        value = entry.get(name)
    else:
        value = getattr(entry, name, None)
    return int(value or 0)


def aggregate(entries: Iterable[Any]) -> Totals:
    """Sum macros of ORM rows or plain mappings."""
    sums = {key: 0 for key in ENTRY_FIELDS}
    for entry in entries:
        for key, column in ENTRY_FIELDS.items():
            sums[key] += _field(entry, column)
    return Totals(**sums)


def combine(a: Totals, b: Totals) -> Totals:
    return Totals(
        calories=a.calories + b.calories,
        protein=a.protein + b.protein,
        carbs=a.carbs + b.carbs,
        fat=a.fat + b.fat,
        grams=a.grams + b.grams,
    )


def combine_all(items: Iterable[Totals]) -> Totals:
    total = Totals.zero()
    for t in items:
        total = combine(total, t)
    return total
