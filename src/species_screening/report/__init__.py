"""Screening report rendering.

Provides ``ReportBuilder``, a Jinja2-based renderer that turns a
``DecisionResult`` into a caller-facing ``ScreeningReport`` with top
drivers, expanded recommendations and copy/paste documentation text.
"""

from species_screening.report.manager import ReportBuilder

__all__ = ["ReportBuilder"]
