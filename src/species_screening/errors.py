"""Exceptions raised by the species_screening SDK.

Only configuration defects are errors.  Malformed *answers* never raise;
they degrade to "condition not satisfied" inside the matcher.
"""

from __future__ import annotations


class RulesetError(ValueError):
    """A ruleset document is structurally invalid.

    Raised at load time by :func:`species_screening.ruleset.parse_ruleset`
    and :class:`species_screening.ruleset.RulesetStore`, never during
    evaluation.

    Attributes:
        source: file path or label identifying the defective document
    """

    def __init__(self, message: str, *, source: str | None = None) -> None:
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)
