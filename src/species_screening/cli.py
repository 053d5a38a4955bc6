"""Command-line interface: ``species-screening``.

Subcommands::

    # Check one or more ruleset files for configuration defects
    species-screening validate v1/rulesets/*.yaml

    # Evaluate an answers JSON file against a ruleset
    species-screening evaluate --ruleset v1/rulesets/rusty_patched_bumble_bee.yaml \\
        --answers answers.json [--report]

    # List the ruleset ids found in a directory
    species-screening list [--ruleset-dir v1/rulesets]
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from species_screening.engine import DecisionEngine
from species_screening.errors import RulesetError
from species_screening.report import ReportBuilder
from species_screening.ruleset import RulesetStore, load_ruleset_file

logger = logging.getLogger(__name__)


def _cmd_validate(args: argparse.Namespace) -> int:
    failures = 0
    for path in args.paths:
        try:
            ruleset = load_ruleset_file(path)
        except (RulesetError, FileNotFoundError) as exc:
            failures += 1
            print(f"FAIL {path}: {exc}", file=sys.stderr)
            continue
        print(f"ok   {path} ({ruleset.id})")
    return 1 if failures else 0


def _cmd_evaluate(args: argparse.Namespace) -> int:
    try:
        ruleset = load_ruleset_file(args.ruleset)
    except (RulesetError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    try:
        with Path(args.answers).open("r", encoding="utf-8") as f:
            answers = json.load(f)
    except (OSError, ValueError) as exc:
        print(f"error: cannot read answers from {args.answers}: {exc}", file=sys.stderr)
        return 1
    if not isinstance(answers, dict):
        print("error: answers file must contain a JSON object", file=sys.stderr)
        return 1

    logger.debug("Evaluating %d answer(s) against %s", len(answers), ruleset.id)
    result = DecisionEngine().evaluate(answers, ruleset)
    if args.report:
        payload = ReportBuilder().build(answers, result, ruleset)
    else:
        payload = result
    print(json.dumps(payload.model_dump(by_alias=True), indent=2, ensure_ascii=False))
    return 0


def _cmd_list(args: argparse.Namespace) -> int:
    store = RulesetStore(ruleset_dir=args.ruleset_dir)
    try:
        store.load()
    except (RulesetError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    for ruleset in store.all():
        title = ruleset.meta.title or ""
        print(f"{ruleset.id}\t{title}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="species-screening",
        description="Validate screening rulesets and evaluate answers against them.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging (stage-by-stage engine trace)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_validate = sub.add_parser("validate", help="Check ruleset files for configuration defects")
    p_validate.add_argument("paths", nargs="+", help="Ruleset YAML files")
    p_validate.set_defaults(func=_cmd_validate)

    p_eval = sub.add_parser("evaluate", help="Evaluate an answers file against a ruleset")
    p_eval.add_argument("--ruleset", required=True, help="Ruleset YAML file")
    p_eval.add_argument("--answers", required=True, help="JSON file with the answer map")
    p_eval.add_argument(
        "--report",
        action="store_true",
        help="Print the full screening report instead of the bare decision",
    )
    p_eval.set_defaults(func=_cmd_evaluate)

    p_list = sub.add_parser("list", help="List rulesets in a directory")
    p_list.add_argument(
        "--ruleset-dir",
        default=None,
        help="Ruleset directory (default: v1/rulesets under the repo root)",
    )
    p_list.set_defaults(func=_cmd_list)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    return args.func(args)


def cli() -> None:
    """Console-script entry point: ``species-screening``."""
    sys.exit(main())
