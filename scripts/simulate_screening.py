#!/usr/bin/env python3
"""Simulate screenings with randomised questionnaire answers.

Draws answer maps from the rusty patched bumble bee questionnaire choices,
runs each through DecisionEngine, and prints the answers, the decision
and a tally of determinations.  Handy for eyeballing how a ruleset edit
shifts outcomes before reloading a server.

Usage::

    # 20 random screenings against the bee ruleset
    python scripts/simulate_screening.py

    # Reproducible run with more samples and the full report text
    python scripts/simulate_screening.py -n 200 --seed 7 --report

    # Summary only
    python scripts/simulate_screening.py -n 1000 -q
"""

from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from collections import Counter
from pathlib import Path
from typing import Any

# ---------------------------------------------------------------------------
# Ensure src/ is importable when running from a checkout without install.
# ---------------------------------------------------------------------------
_REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_REPO_ROOT / "src"))

from species_screening.constants import UNKNOWN_ANSWER  # noqa: E402
from species_screening.engine import DecisionEngine  # noqa: E402
from species_screening.models.result import DecisionResult  # noqa: E402
from species_screening.report import ReportBuilder  # noqa: E402
from species_screening.ruleset import RulesetStore  # noqa: E402

_DEFAULT_RULESET = "rusty_patched_bumble_bee"

YES_NO_UNSURE = ["Yes", "No", UNKNOWN_ANSWER]

# Questionnaire choices per question; activities_selected is multi-select.
CHOICES: dict[str, list[Any]] = {
    "federal_nexus": YES_NO_UNSURE,
    "hpz_overlap": YES_NO_UNSURE,
    "habitat_present": YES_NO_UNSURE,
    "active_season_work": YES_NO_UNSURE,
    "overwinter_season_ground": YES_NO_UNSURE,
    "insecticide_used": YES_NO_UNSURE,
    "fungicide_used": YES_NO_UNSURE,
    "herbicide_used": YES_NO_UNSURE,
    "herbicide_method": [
        "Spot-only (wicking, glove, cut-stump, basal bark, limited spot spray)",
        "Broadcast (boom, aerial, widespread application)",
        UNKNOWN_ANSWER,
    ],
    "herbicide_exposure_risk": YES_NO_UNSURE,
    "forage_unavailable": YES_NO_UNSURE,
    "forage_acres": ["", "0.5", "1.5", "2", "5", "12"],
}

ACTIVITIES = [
    "Ground disturbance (grading, trenching, excavation, heavy equipment)",
    "Vegetation management (mowing, brush cutting, tree removal, haying, grazing)",
    "Prescribed fire",
    "Herbicide application",
    "Insecticide application",
    "Fungicide application",
]

_quiet = False


def _print(*args, **kwargs) -> None:
    if not _quiet:
        print(*args, **kwargs)


def random_answers(rng: random.Random, *, gate_bias: float = 0.8) -> dict[str, Any]:
    """Draw one answer map.

    The three scope gates answer "Yes" with probability ``gate_bias`` so
    most runs reach the scoring stages.
    """
    answers: dict[str, Any] = {}
    for field, choices in CHOICES.items():
        if field in ("federal_nexus", "hpz_overlap", "habitat_present") and rng.random() < gate_bias:
            answers[field] = "Yes"
        else:
            answers[field] = rng.choice(choices)
    answers["activities_selected"] = rng.sample(ACTIVITIES, k=rng.randint(0, len(ACTIVITIES)))
    return answers


def log_run(index: int, answers: dict[str, Any], result: DecisionResult) -> None:
    _print(f"\n [{index}] {json.dumps(answers, ensure_ascii=False)}")
    _print(f"     -> {result.determination}")
    _print(f"        score {result.risk_score} ({result.risk_band}), "
           f"confidence {result.confidence}, unknowns {result.unknowns}")
    for driver in result.drivers:
        _print(f"        {driver.points:+4d}  {driver.label}")


def run_simulation(ruleset_id: str, runs: int, seed: int | None, show_report: bool) -> int:
    store = RulesetStore()
    store.load()
    if ruleset_id not in store:
        print(f"Error: Unknown ruleset '{ruleset_id}'.")
        print(f"Available rulesets: {', '.join(store.ids())}")
        return 1

    ruleset = store.get(ruleset_id)
    engine = DecisionEngine()
    builder = ReportBuilder()
    rng = random.Random(seed)

    _print(f"{'=' * 62}")
    _print(f" SCREENING SIMULATION: {ruleset_id}")
    _print(f" Runs: {runs}   Seed: {seed if seed is not None else '(random)'}")
    _print(f"{'=' * 62}")

    tally: Counter[str] = Counter()
    for i in range(1, runs + 1):
        answers = random_answers(rng)
        result = engine.evaluate(answers, ruleset)
        tally[result.determination] += 1
        log_run(i, answers, result)
        if show_report:
            report = builder.build(answers, result, ruleset)
            for line in report.documentation_text.splitlines():
                _print(f"        | {line}")

    print(f"\n{'=' * 62}")
    print(f" Determinations over {runs} run(s)")
    print(f"{'=' * 62}")
    for determination, count in tally.most_common():
        print(f" {count:5d}  {determination}")
    return 0


def main() -> None:
    global _quiet

    parser = argparse.ArgumentParser(
        description="Run randomised questionnaire answers through a screening ruleset.",
    )
    parser.add_argument(
        "-r", "--ruleset",
        default=_DEFAULT_RULESET,
        help=f"Ruleset id to simulate (default: {_DEFAULT_RULESET})",
    )
    parser.add_argument("-n", "--runs", type=int, default=20, help="Number of screenings (default: 20)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible answers")
    parser.add_argument(
        "--report",
        action="store_true",
        help="Print the documentation text for each run",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Print only the determination tally",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging (stage-by-stage engine trace)",
    )
    args = parser.parse_args()

    _quiet = args.quiet
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    sys.exit(run_simulation(args.ruleset, args.runs, args.seed, args.report))


if __name__ == "__main__":
    main()
