"""ReportBuilder — Jinja2-based documentation renderer.

Loads templates from the ``template/`` directory.  Each ruleset names its
template in ``report.template``; rulesets that do not fall back to
``generic.jinja2``.

This is presentation logic only: it reads a finished ``DecisionResult``
and never changes the determination, score or confidence.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Mapping

import jinja2

from species_screening.constants import NOT_PROVIDED
from species_screening.models.result import DecisionResult, ScreeningReport
from species_screening.models.ruleset import ReportConfig, Ruleset


def _signed(points: int) -> str:
    return f"+{points}" if points > 0 else str(points)


def _provided(answers: Mapping[str, Any]) -> Callable[..., str]:
    """Build the ``provided(field, default)`` helper exposed to templates."""

    def provided(field: str, default: str = NOT_PROVIDED) -> str:
        value = answers.get(field)
        if value is None or value == "":
            return default
        if isinstance(value, (list, tuple)):
            return ", ".join(str(v) for v in value) if value else default
        return str(value)

    return provided


class ReportBuilder:
    """Renders screening reports from decision results.

    Args:
        template_dir: optional override for the template directory.
            Defaults to ``template/`` sibling of this module.
    """

    def __init__(self, template_dir: Path | None = None) -> None:
        if template_dir is None:
            template_dir = Path(__file__).parent / "template"
        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=jinja2.StrictUndefined,
        )
        self._env.filters["signed"] = _signed

    def build(
        self,
        answers: Mapping[str, Any] | None,
        result: DecisionResult,
        ruleset: Ruleset,
    ) -> ScreeningReport:
        """Assemble the full report for one decision."""
        answers = answers or {}
        cfg = ruleset.report
        top_drivers = tuple(result.drivers[: cfg.max_drivers]) or (cfg.empty_driver,)
        recommendations = self.recommendations(result, cfg)

        documentation = self.render(
            cfg.template,
            result=result,
            meta=ruleset.meta,
            answers=answers,
            top_drivers=top_drivers,
            recommendations=recommendations,
            provided=_provided(answers),
        )

        return ScreeningReport(
            ruleset_id=ruleset.id,
            determination=result.determination,
            risk_score=result.risk_score,
            risk_score_max=ruleset.meta.risk_score_max,
            risk_band=result.risk_band,
            confidence=result.confidence,
            why_text=result.why_text,
            next_action=result.next_action,
            top_drivers=top_drivers,
            recommendations=recommendations,
            documentation_text=documentation,
        )

    @staticmethod
    def recommendations(result: DecisionResult, cfg: ReportConfig) -> tuple[str, ...]:
        """Result recommendations plus driver- and confidence-based additions.

        Driver matches are case-insensitive substring checks against every
        driver label.  Duplicates are dropped (first occurrence wins) and
        the list is capped at ``cfg.max_recommendations``.
        """
        recs = list(result.recommendations)

        labels = [d.label.lower() for d in result.drivers]
        for rule in cfg.driver_recommendations:
            needle = rule.driver_label_contains.lower()
            if any(needle in label for label in labels):
                recs.extend(rule.add)

        if cfg.uncertainty is not None and result.confidence != cfg.uncertainty.unless_confidence:
            recs.append(cfg.uncertainty.recommendation)

        unique = list(dict.fromkeys(recs))
        return tuple(unique[: cfg.max_recommendations])

    def render(self, template_name: str, **context) -> str:
        """Render a named template with arbitrary context."""
        template = self._env.get_template(template_name)
        return template.render(**context)
