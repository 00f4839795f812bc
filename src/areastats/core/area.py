from __future__ import annotations

from typing import Dict, Iterator, List

from areastats.core.errors import NotFoundError, ValidationError
from areastats.core.measure import Measure


UNNAMED = "Unnamed"


class Area:
    """
    A geographic area identified by its local authority code.

    Holds names keyed by ISO 639-3 language code (e.g. 'eng', 'cym') and
    Measures keyed by lowercase codename. Both containers are plain
    overwrite-by-key maps; combining two Areas is done by Areas.set_area().
    """

    def __init__(self, local_authority_code: str) -> None:
        self.local_authority_code = local_authority_code
        self.names: Dict[str, str] = {}
        self.measures: Dict[str, Measure] = {}

    # ---------------------------------------------------------------------
    # Names
    # ---------------------------------------------------------------------

    def set_name(self, lang: str, name: str) -> None:
        code = str(lang).lower()
        if len(code) != 3 or not (code.isascii() and code.isalpha()):
            raise ValidationError(
                f"Invalid language code {lang!r}: expected three alphabetical letters only"
            )
        self.names[code] = name

    def get_name(self, lang: str) -> str:
        try:
            return self.names[str(lang).lower()]
        except KeyError:
            raise NotFoundError(
                f"Language {lang!r} not found for area {self.local_authority_code}"
            ) from None

    def display_name(self) -> str:
        """
        Names for display, ordered by language code.

        Two or more names render as '<last code's name> / <first code's name>',
        which for 'cym' and 'eng' puts the English name first.
        """
        if not self.names:
            return UNNAMED
        ordered = [self.names[code] for code in sorted(self.names)]
        if len(ordered) == 1:
            return ordered[0]
        return f"{ordered[-1]} / {ordered[0]}"

    # ---------------------------------------------------------------------
    # Measures
    # ---------------------------------------------------------------------

    def set_measure(self, codename: str, measure: Measure) -> None:
        self.measures[str(codename).lower()] = measure

    def get_measure(self, codename: str) -> Measure:
        try:
            return self.measures[str(codename).lower()]
        except KeyError:
            raise NotFoundError(f"No measure found matching {codename}") from None

    def has_measure(self, codename: str) -> bool:
        return str(codename).lower() in self.measures

    def sorted_measures(self) -> List[Measure]:
        return [self.measures[code] for code in sorted(self.measures)]

    def size(self) -> int:
        return len(self.measures)

    def __len__(self) -> int:
        return len(self.measures)

    def __iter__(self) -> Iterator[Measure]:
        return iter(self.sorted_measures())

    # ---------------------------------------------------------------------
    # Comparison / display
    # ---------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        # Names are compared as a set of strings, regardless of language code.
        if not isinstance(other, Area):
            return NotImplemented
        return (
            self.local_authority_code == other.local_authority_code
            and set(self.names.values()) == set(other.names.values())
            and self.measures == other.measures
        )

    def __repr__(self) -> str:
        return (
            f"Area(local_authority_code={self.local_authority_code!r}, "
            f"names={self.names!r}, measures={sorted(self.measures)!r})"
        )

    def __str__(self) -> str:
        return f"{self.display_name()} ({self.local_authority_code})"
