"""Tests for the host-facing RoadNetworkModel facade."""

from typing import Any

import pytest

from pavement_engine.config import DATA_DIR, load_lookups
from pavement_engine.core.distress import DistressType
from pavement_engine.core.errors import ConfigurationError, SegmentComputationError
from pavement_engine.core.factory import RANK_KEYS
from pavement_engine.core.model import RoadNetworkModel
from pavement_engine.data_ingestion.raw_data import load_raw_rows

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _sample_model() -> RoadNetworkModel:
    return RoadNetworkModel(load_lookups())


def _sample_rows():
    return load_raw_rows(DATA_DIR / "sample_network.csv")


def _initialised(model: RoadNetworkModel, index: int) -> dict[str, Any]:
    return model.initialise(index, _sample_rows()[index])


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


def test_initialise_returns_parameters() -> None:
    """Every segment of the sample network initialises to a full parameter set."""
    model = _sample_model()
    for index, row in enumerate(_sample_rows()):
        params = model.initialise(index, row)
        assert params["file_seg_name"] == row.text("file_seg_name")
        for dt in DistressType:
            assert f"para_{dt.parameter_key}_pct" in params
            assert f"para_{dt.parameter_key}_info" in params
        for key in RANK_KEYS:
            assert params[key] == 0.0
        assert params["para_csl_flag"] in (0, 1)
        assert params["para_csl_status"]
        assert params["para_treat_count"] == 0


def test_initialise_accepts_plain_mapping() -> None:
    model = _sample_model()
    row = _sample_rows()[0]
    assert model.initialise(0, row.to_dict()) == model.initialise(0, row)


def test_initialise_flags_second_coat_candidate() -> None:
    params = _initialised(_sample_model(), 2)
    assert params["para_csl_flag"] == 1
    assert params["para_csl_status"] == "ok"


def test_initialise_respects_committed_treatment() -> None:
    model = _sample_model()
    params = model.initialise(2, _sample_rows()[2], {"periods_to_next_treatment": 3})
    assert params["para_csl_flag"] == 0
    assert params["para_csl_status"].startswith("Next treatment in 3 periods")


def test_increment_ages_parameters() -> None:
    model = _sample_model()
    params = _initialised(model, 0)
    advanced = model.increment(0, 1, params)
    assert advanced["para_pave_age"] == pytest.approx(params["para_pave_age"] + 1.0)
    assert advanced["para_pave_remlife"] == pytest.approx(params["para_pave_remlife"] - 1.0)
    assert advanced["para_surf_age"] == pytest.approx(params["para_surf_age"] + 1.0)
    assert advanced["para_rut"] >= params["para_rut"]
    assert advanced["para_treat_count"] == 0


def test_increment_does_not_mutate_input() -> None:
    model = _sample_model()
    params = _initialised(model, 1)
    snapshot = dict(params)
    model.increment(1, 1, params)
    assert params == snapshot


def test_second_coat_proposed_and_applied() -> None:
    model = _sample_model()
    params = _initialised(model, 2)

    proposals = model.get_treatment_candidates(2, 1, params)
    assert [p.treatment_name for p in proposals] == ["Chipseal_S"]
    assert proposals[0].is_forced
    assert proposals[0].element_index == 2

    treated = model.reset("Chipseal_S", 2, 1, params)
    assert treated["para_surf_func"] == "2"
    assert treated["para_surf_age"] == 0.0
    assert treated["para_treat_count"] == 1
    assert treated["para_is_treated_flag"] == 1


def test_reset_without_treatment_keeps_state() -> None:
    model = _sample_model()
    params = _initialised(model, 0)
    unchanged = model.reset(None, 0, 1, params)
    assert unchanged["para_surf_age"] == params["para_surf_age"]
    assert unchanged["para_treat_count"] == 0


def test_triggered_maintenance_matches_cost() -> None:
    model = _sample_model()
    for index in range(len(_sample_rows())):
        params = model.increment(index, 1, _initialised(model, index))
        cost = params["para_maint_cost_perkm"]
        proposal = model.get_triggered_maintenance(index, 1, params)
        if cost <= 0.0:
            assert proposal is None
            continue
        assert proposal is not None
        assert proposal.treatment_name == "RMaint"
        assert proposal.quantity == pytest.approx(cost * float(params["file_length"]) / 1000.0)


# ---------------------------------------------------------------------------
# Error wrapping
# ---------------------------------------------------------------------------


def test_initialise_error_carries_element_index() -> None:
    model = _sample_model()
    values = _sample_rows()[0].to_dict()
    values["file_pave_date"] = "sometime"
    with pytest.raises(SegmentComputationError) as excinfo:
        model.initialise(7, values)
    assert excinfo.value.element_index == 7
    assert excinfo.value.operation == "initialise"


def test_missing_parameter_is_wrapped() -> None:
    model = _sample_model()
    params = _initialised(model, 0)
    del params["para_adt"]
    with pytest.raises(SegmentComputationError) as excinfo:
        model.increment(0, 1, params)
    assert excinfo.value.element_index == 0
    assert excinfo.value.operation == "increment"
    assert isinstance(excinfo.value.__cause__, KeyError)


def test_unknown_treatment_is_wrapped() -> None:
    model = _sample_model()
    params = _initialised(model, 0)
    with pytest.raises(SegmentComputationError, match="Nope") as excinfo:
        model.reset("Nope", 0, 1, params)
    assert excinfo.value.operation == "reset"
    assert isinstance(excinfo.value.__cause__, ConfigurationError)
