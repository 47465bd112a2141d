"""Configuration loader for the pavement deterioration engine."""

from pathlib import Path

import yaml

from pavement_engine.core.constants import ModelConstants
from pavement_engine.core.lookups import LookupTables, TreatmentType

DATA_DIR: Path = Path(__file__).resolve().parent / "data"
LOOKUPS_PATH: Path = DATA_DIR / "lookups.yaml"

_TREATMENT_FIELDS: tuple[str, ...] = ("category", "unit_rate")


def load_lookups(path: Path | None = None) -> LookupTables:
    """Load lookup sets and treatment types from a YAML file.

    The file holds a ``lookups`` mapping of set name to ``{key: value}``
    pairs and a ``treatments`` mapping of treatment name to its
    ``category`` and ``unit_rate``.

    Args:
        path: Optional override for the lookups file path.

    Returns:
        Read-only :class:`LookupTables`.

    Raises:
        FileNotFoundError: If the lookups file does not exist.
        ValueError: If a section, set or treatment entry is malformed.
    """
    lookups_path = path or LOOKUPS_PATH
    if not lookups_path.exists():
        raise FileNotFoundError(f"Lookups file not found: {lookups_path}")

    with open(lookups_path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh)

    if not isinstance(data, dict):
        raise ValueError(f"Lookups file {lookups_path} must contain a mapping")

    raw_sets = data.get("lookups")
    if not isinstance(raw_sets, dict) or not raw_sets:
        raise ValueError(f"Lookups file {lookups_path} has no 'lookups' section")

    sets: dict[str, dict] = {}
    for set_name, values in raw_sets.items():
        if not isinstance(values, dict):
            raise ValueError(
                f"Lookup set '{set_name}' must be a mapping, got {type(values).__name__}"
            )
        sets[str(set_name)] = values

    treatments: dict[str, TreatmentType] = {}
    for name, entry in (data.get("treatments") or {}).items():
        if not isinstance(entry, dict):
            raise ValueError(f"Treatment '{name}' must be a mapping")
        # --- Validate required fields ---
        for field in _TREATMENT_FIELDS:
            if field not in entry:
                raise ValueError(f"Treatment '{name}' is missing required field '{field}'")

        rate = entry["unit_rate"]
        if not isinstance(rate, (int, float)):
            raise ValueError(
                f"Treatment '{name}': 'unit_rate' must be numeric, got {type(rate).__name__}"
            )
        treatments[str(name)] = TreatmentType(
            name=str(name),
            category=str(entry["category"]),
            unit_rate=float(rate),
        )

    return LookupTables(sets, treatments)


def load_model_constants(lookups: LookupTables | None = None) -> ModelConstants:
    """Resolve model constants, loading the default lookups if none given.

    Raises:
        ConfigurationError: If a required set or key is missing.
    """
    return ModelConstants.from_lookups(lookups or load_lookups())
