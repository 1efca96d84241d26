"""Static population lookup for per-capita metrics.

Absent regions are a handled state: lookups return None and callers
exclude the region instead of dividing.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Mapping

from core.errors import EpiConfigError
from core.types import RegionSeries


class PopulationRegistry:
    """Immutable mapping from region name to population count."""

    def __init__(self, entries: Iterable[tuple[str, int]] = ()) -> None:
        """Build the registry; later duplicate names overwrite earlier ones.

        Args:
            entries: ``(name, population)`` pairs.

        Raises:
            EpiConfigError: If a population is not a positive integer.
        """
        table: dict[str, int] = {}
        for name, population in entries:
            table[name] = _validate_population(name, population)
        self._table = table

    @classmethod
    def from_mapping(cls, populations: Mapping[str, int]) -> "PopulationRegistry":
        """Build a registry from a name-to-population mapping."""
        return cls(populations.items())

    @classmethod
    def from_series(cls, series_map: Mapping[str, RegionSeries]) -> "PopulationRegistry":
        """Build a registry from populations bound at ingestion time.

        Entries are keyed by display name; regions without a known
        population are left out.
        """
        return cls(
            (series.display_name, series.population)
            for series in series_map.values()
            if series.population is not None
        )

    def lookup(self, region_name: str) -> int | None:
        """Return the population for a region, or None when unknown."""
        return self._table.get(region_name)

    def merged_with(self, other: "PopulationRegistry") -> "PopulationRegistry":
        """Return a new registry where entries of ``other`` win."""
        return PopulationRegistry([*self._table.items(), *other._table.items()])

    def __contains__(self, region_name: object) -> bool:
        return region_name in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)


def _validate_population(name: str, population: object) -> int:
    if isinstance(population, bool) or not isinstance(population, int) or population <= 0:
        raise EpiConfigError(
            f"Invalid population for region '{name}': expected a positive integer, "
            f"got {population!r}. Fix the population table."
        )
    return population
