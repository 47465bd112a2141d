"""Read-only context shared by every segment computation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from pavement_engine.core.constants import ModelConstants
from pavement_engine.core.distress import DistressCurveModel, DistressType, build_distress_models
from pavement_engine.core.lookups import LookupTables


@dataclass(frozen=True)
class ModelContext:
    """Lookup tables, resolved constants and distress curve models.

    Attributes:
        lookups: Loaded lookup tables.
        constants: Scalar constants resolved from ``lookups``.
        distress_models: One curve model per distress type, in
            initialisation order.
    """

    lookups: LookupTables
    constants: ModelConstants
    distress_models: Mapping[DistressType, DistressCurveModel]

    @classmethod
    def from_lookups(cls, lookups: LookupTables) -> ModelContext:
        """Resolve constants and build curve models from *lookups*.

        Raises:
            ConfigurationError: If a required lookup set or key is missing.
        """
        return cls(
            lookups=lookups,
            constants=ModelConstants.from_lookups(lookups),
            distress_models=MappingProxyType(build_distress_models(lookups)),
        )
