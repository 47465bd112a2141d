"""CLI entrypoint for the pavement deterioration engine."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import pandas as pd

from pavement_engine import __version__
from pavement_engine.config import DATA_DIR, load_lookups
from pavement_engine.core.model import RoadNetworkModel
from pavement_engine.data_ingestion.raw_data import load_raw_rows

SAMPLE_NETWORK_PATH: Path = DATA_DIR / "sample_network.csv"
PERIODS: int = 5

_RANKED: dict[str, str] = {
    "para_pdi": "para_pdi_rank",
    "para_sdi": "para_sdi_rank",
    "para_rut": "para_rut_rank",
    "para_surf_life_ach": "para_sla_rank",
}


def write_ranks(states: list[dict[str, Any]]) -> None:
    """Write network percentile ranks (0-100) into each parameter dict."""
    frame = pd.DataFrame(states)
    for column, rank_key in _RANKED.items():
        ranks = frame[column].astype(float).rank(pct=True) * 100.0
        for params, rank in zip(states, ranks):
            params[rank_key] = float(rank)


def main(argv: list[str] | None = None) -> None:
    """Run a demonstration of the segment lifecycle over a small network.

    An optional first argument names a raw inventory CSV to use instead of
    the bundled sample network.
    """
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    args = sys.argv[1:] if argv is None else argv
    raw_path = Path(args[0]) if args else SAMPLE_NETWORK_PATH

    print(f"Pavement Deterioration Engine v{__version__}")
    print("=" * 56)

    # -- Load lookups and raw data -------------------------------------------
    lookups = load_lookups()
    model = RoadNetworkModel(lookups)
    rows = load_raw_rows(raw_path)
    print(f"\nLookups: {len(lookups.set_names())} sets, {len(lookups.treatment_names())} treatments")
    print(f"Network: {len(rows)} segments from {raw_path.name}")

    # -- Initialise -----------------------------------------------------------
    states = [model.initialise(i, row) for i, row in enumerate(rows)]
    print(f"\n  {'Segment':<10}  {'Surf':>4}  {'Age':>6}  {'PDI':>6}  {'SDI':>6}  {'Rut':>5}  Candidate")
    print(f"  {'-' * 10}  {'-' * 4}  {'-' * 6}  {'-' * 6}  {'-' * 6}  {'-' * 5}  {'-' * 9}")
    for p in states:
        print(
            f"  {p['file_seg_name']:<10}  {p['para_surf_class']:>4}  "
            f"{p['para_surf_age']:6.2f}  {p['para_pdi']:6.2f}  {p['para_sdi']:6.2f}  "
            f"{p['para_rut']:5.1f}  {p['para_csl_status']}"
        )

    # -- Simulate -------------------------------------------------------------
    print(f"\nSimulating {PERIODS} periods (best-scoring proposal applied):\n")
    for period in range(1, PERIODS + 1):
        write_ranks(states)
        for i, params in enumerate(states):
            proposals = model.get_treatment_candidates(i, period, params)
            if proposals:
                best = max(proposals, key=lambda p: p.suitability_score)
                states[i] = model.reset(best.treatment_name, i, period, params)
                print(
                    f"  P{period}  {params['file_seg_name']:<10}  {best.treatment_name:<12}  "
                    f"TSS={best.suitability_score:6.1f}  {best.reason}"
                )
                continue

            states[i] = model.increment(i, period, params)
            maintenance = model.get_triggered_maintenance(i, period, states[i])
            if maintenance is not None:
                print(
                    f"  P{period}  {params['file_seg_name']:<10}  {maintenance.treatment_name:<12}  "
                    f"cost={maintenance.quantity:9.0f}  {maintenance.comment}"
                )

    print("\nFinal state:")
    for p in states:
        print(
            f"  {p['file_seg_name']:<10}  surf={p['para_surf_class']:<6} func={p['para_surf_func']:<3} "
            f"age={p['para_surf_age']:5.2f}  PDI={p['para_pdi']:6.2f}  treatments={p['para_treat_count']}"
        )


if __name__ == "__main__":
    sys.exit(main() or 0)
