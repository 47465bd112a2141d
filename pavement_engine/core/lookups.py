"""Read-only lookup service and treatment metadata.

Lookup tables are named *sets* of ``key -> value`` pairs, loaded once from
configuration and shared by every segment computation.  Keys are matched
case-insensitively.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from pavement_engine.core.errors import ConfigurationError


@dataclass(frozen=True)
class TreatmentType:
    """Metadata for a named treatment.

    Attributes:
        name: Treatment name as used in proposals (e.g. ``"ChipSeal_P"``).
        category: Free-text category.  Categories containing ``"rehab"``
            or ``"holding"`` select the matching distress reset rules; all
            other categories are treated as resurfacings.
        unit_rate: Cost per unit quantity.
    """

    name: str
    category: str
    unit_rate: float

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Treatment name must be non-empty.")
        if self.unit_rate < 0.0:
            raise ValueError("unit_rate must be >= 0.")


def _normalise_key(key: Any) -> str:
    return str(key).strip().lower()


class LookupTables:
    """Immutable collection of named lookup sets.

    Args:
        sets: Mapping of set name to ``{key: value}`` mapping.
        treatments: Treatment metadata keyed by treatment name.
    """

    def __init__(
        self,
        sets: Mapping[str, Mapping[Any, Any]],
        treatments: Mapping[str, TreatmentType] | None = None,
    ):
        frozen: dict[str, Mapping[str, Any]] = {}
        for set_name, values in sets.items():
            frozen[_normalise_key(set_name)] = MappingProxyType(
                {_normalise_key(k): v for k, v in values.items()}
            )
        self._sets: Mapping[str, Mapping[str, Any]] = MappingProxyType(frozen)
        self._treatments: Mapping[str, TreatmentType] = MappingProxyType(
            {_normalise_key(name): t for name, t in (treatments or {}).items()}
        )

    # -- presence ------------------------------------------------------------

    def has_set(self, set_name: str) -> bool:
        return _normalise_key(set_name) in self._sets

    def has_key(self, set_name: str, key: Any) -> bool:
        values = self._sets.get(_normalise_key(set_name))
        return values is not None and _normalise_key(key) in values

    def set_names(self) -> list[str]:
        return sorted(self._sets)

    # -- values --------------------------------------------------------------

    def lookup_set(self, set_name: str) -> Mapping[str, Any]:
        """Return the read-only mapping for *set_name*.

        Raises:
            ConfigurationError: If the set does not exist.
        """
        try:
            return self._sets[_normalise_key(set_name)]
        except KeyError:
            raise ConfigurationError(
                f"Lookup set '{set_name}' is not defined"
            ) from None

    def raw_value(self, set_name: str, key: Any) -> Any:
        values = self.lookup_set(set_name)
        try:
            return values[_normalise_key(key)]
        except KeyError:
            raise ConfigurationError(
                f"Key '{key}' not found in lookup set '{set_name}'"
            ) from None

    def number_value(self, set_name: str, key: Any) -> float:
        """Return a numeric lookup value.

        Raises:
            ConfigurationError: If the set/key is missing or the value is
                not numeric.
        """
        value = self.raw_value(set_name, key)
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"Value '{value}' for key '{key}' in lookup set '{set_name}' "
                "is not numeric"
            ) from None

    def text_value(self, set_name: str, key: Any) -> str:
        return str(self.raw_value(set_name, key))

    def text_value_or_default(self, set_name: str, key: Any) -> str:
        """Return the text value for *key*, falling back to key ``default``."""
        if self.has_key(set_name, key):
            return self.text_value(set_name, key)
        return self.text_value(set_name, "default")

    def number_value_or_default(self, set_name: str, key: Any) -> float:
        """Return the numeric value for *key*, falling back to key ``default``."""
        if self.has_key(set_name, key):
            return self.number_value(set_name, key)
        return self.number_value(set_name, "default")

    def range_value(self, set_name: str, x: float) -> float:
        """Band lookup over a set whose keys are numeric lower bounds.

        Returns the value of the largest key that is ``<= x``.  Values
        below the smallest key map to the smallest key's value.

        Raises:
            ConfigurationError: If the set is missing, empty, or has
                non-numeric keys.
        """
        values = self.lookup_set(set_name)
        try:
            bands = sorted((float(k), float(v)) for k, v in values.items())
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"Lookup set '{set_name}' must have numeric keys and values "
                "for a range lookup"
            ) from None
        if not bands:
            raise ConfigurationError(f"Lookup set '{set_name}' is empty")
        result = bands[0][1]
        for lower, value in bands:
            if x >= lower:
                result = value
            else:
                break
        return result

    # -- treatments ----------------------------------------------------------

    def treatment(self, name: str) -> TreatmentType:
        """Return metadata for treatment *name*.

        Raises:
            ConfigurationError: If the treatment is not defined.
        """
        try:
            return self._treatments[_normalise_key(name)]
        except KeyError:
            raise ConfigurationError(
                f"Treatment type '{name}' is not defined"
            ) from None

    def treatment_names(self) -> list[str]:
        return [t.name for t in self._treatments.values()]
