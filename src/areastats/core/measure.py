from __future__ import annotations

import math
from typing import Dict, Iterator, List, Tuple

from areastats.core.errors import NotFoundError


class Measure:
    """
    A single named time series: readings keyed by year.

    The codename is lowercased once at construction and never changes.
    The label is human readable and may be replaced when data from another
    source is merged in. Readings are stored per year (one per year); all
    iteration is in ascending year order regardless of insertion order.
    """

    def __init__(self, codename: str, label: str) -> None:
        self._codename = str(codename).lower()
        self.label = label
        self._values: Dict[int, float] = {}

    @property
    def codename(self) -> str:
        return self._codename

    @property
    def values(self) -> Dict[int, float]:
        """Copy of the readings, ordered by year."""
        return {year: self._values[year] for year in sorted(self._values)}

    def years(self) -> List[int]:
        return sorted(self._values)

    def items(self) -> Iterator[Tuple[int, float]]:
        for year in sorted(self._values):
            yield year, self._values[year]

    def set_value(self, year: int, value: float) -> None:
        self._values[int(year)] = float(value)

    def get_value(self, year: int) -> float:
        try:
            return self._values[int(year)]
        except KeyError:
            raise NotFoundError(f"No value found for year {year}") from None

    def size(self) -> int:
        return len(self._values)

    def __len__(self) -> int:
        return len(self._values)

    # ---------------------------------------------------------------------
    # Derived statistics
    # ---------------------------------------------------------------------

    def average(self) -> float:
        if not self._values:
            return 0.0
        return sum(self._values.values()) / len(self._values)

    def _first_and_last(self) -> Tuple[float, float]:
        years = sorted(self._values)
        return self._values[years[0]], self._values[years[-1]]

    def difference(self) -> float:
        """Reading at the last year minus reading at the first year."""
        if not self._values:
            return 0.0
        first, last = self._first_and_last()
        return last - first

    def difference_as_percentage(self) -> float:
        """
        difference() relative to the first year's reading, as a percentage.

        A first reading of exactly 0 is not special-cased: the result follows
        IEEE division (+/-inf, or nan when the difference is 0 as well).
        """
        if not self._values:
            return 0.0
        first, last = self._first_and_last()
        diff = last - first
        if first == 0:
            if diff == 0:
                return math.nan
            return math.copysign(math.inf, diff)
        return diff / first * 100

    # ---------------------------------------------------------------------
    # Merging / comparison
    # ---------------------------------------------------------------------

    def merge(self, other: "Measure") -> None:
        """Take other's label and readings; other wins on any shared year."""
        self.label = other.label
        self._values.update(other._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Measure):
            return NotImplemented
        return (
            self._codename == other._codename
            and self.label == other.label
            and self._values == other._values
        )

    def __repr__(self) -> str:
        return f"Measure(codename={self._codename!r}, label={self.label!r}, values={self.values!r})"

    def __str__(self) -> str:
        from areastats.core.render import format_measure

        return format_measure(self)
