"""RulesetStore — loads YAML rulesets from ``v1/rulesets/`` into typed models.

This is the single deserialization boundary: every ruleset, whether read
from disk or handed over as a dict, goes through :func:`parse_ruleset`,
which turns structural defects into :class:`RulesetError` before any
evaluation can see them.

Usage::

    store = RulesetStore()          # defaults to v1/rulesets relative to repo root
    store.load()                    # parse every *.yaml file

    ruleset = store.get("rusty_patched_bumble_bee")
    store.reload()                  # re-read the directory, swap atomically
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from species_screening.constants import RULESET_SUFFIXES
from species_screening.errors import RulesetError
from species_screening.models.ruleset import Ruleset

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def find_repo_root(start: Optional[Path] = None) -> Path:
    """Walk upwards from *start* to find the repo root (dir with pyproject.toml or .git).

    Falls back to cwd if no marker is found.
    """
    p = (start or Path(__file__).resolve()).parent
    for parent in [p, *p.parents]:
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent
    return Path.cwd()


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _check_acyclic(node: Any, source: str | None) -> None:
    """Reject documents whose YAML aliases make a container contain itself.

    Shared alias subtrees are walked once.  Nesting deeper than the
    interpreter recursion limit is reported as a defect too.
    """
    active: set[int] = set()
    finished: set[int] = set()

    def visit(current: Any) -> None:
        if not isinstance(current, (dict, list)) or id(current) in finished:
            return
        if id(current) in active:
            raise RulesetError("cyclic reference in ruleset document", source=source)
        active.add(id(current))
        children = current.values() if isinstance(current, dict) else current
        for child in children:
            visit(child)
        active.discard(id(current))
        finished.add(id(current))

    try:
        visit(node)
    except RecursionError as exc:
        raise RulesetError("ruleset document is nested too deeply", source=source) from exc


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def parse_ruleset(
    raw: Any,
    *,
    source: str | None = None,
    default_id: str | None = None,
) -> Ruleset:
    """Validate a raw ruleset document into a :class:`Ruleset`.

    Args:
        raw: the parsed document (dict with ``meta``, ``rulesInOrder``, ``scoring``)
        source: file path or label used in error messages
        default_id: id to use when ``meta.id`` is not set

    Raises:
        RulesetError: if the document is structurally invalid — missing
            ``meta``/``scoring``, unrecognised condition shapes, triggers
            without a determination, cyclic aliases, and so on.
    """
    if not isinstance(raw, dict):
        raise RulesetError("ruleset document must be a mapping", source=source)

    for section in ("meta", "scoring"):
        if section not in raw:
            logger.error("Ruleset %s is missing required section '%s'", source, section)
            raise RulesetError(f"missing required section '{section}'", source=source)

    _check_acyclic(raw, source)

    try:
        ruleset = Ruleset.model_validate(raw)
    except ValidationError as exc:
        message = _format_validation_error(exc)
        logger.error("Ruleset %s failed validation: %s", source, message)
        raise RulesetError(message, source=source) from exc

    if ruleset.meta.id is None and default_id is not None:
        meta = ruleset.meta.model_copy(update={"id": default_id})
        ruleset = ruleset.model_copy(update={"meta": meta})
    return ruleset


def load_ruleset_file(path: Path | str) -> Ruleset:
    """Read and validate one ruleset file; the file stem is the default id."""
    path = Path(path)
    try:
        raw = load_yaml(path)
    except yaml.YAMLError as exc:
        logger.error("Ruleset %s is not valid YAML: %s", path, exc)
        raise RulesetError(f"invalid YAML: {exc}", source=str(path)) from exc
    return parse_ruleset(raw, source=str(path), default_id=path.stem)


# ---------------------------------------------------------------------------
# RulesetStore
# ---------------------------------------------------------------------------

class RulesetStore:
    """Loads every ruleset file in a directory and provides lookup by id.

    The id -> ruleset mapping is replaced wholesale on :meth:`reload`, never
    edited in place, so an evaluation holding a ``Ruleset`` is unaffected
    by a concurrent reload.
    """

    def __init__(self, ruleset_dir: str | Path | None = None) -> None:
        if ruleset_dir is None:
            ruleset_dir = find_repo_root() / "v1" / "rulesets"
        self._base = Path(ruleset_dir)

        # Populated by load()
        self._rulesets: dict[str, Ruleset] = {}

    @property
    def ruleset_dir(self) -> Path:
        return self._base

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Parse all ruleset files under the directory.

        Call this once at startup.  Raises ``FileNotFoundError`` if the
        directory is missing and :class:`RulesetError` on the first
        defective file.
        """
        self._rulesets = self._read_all()
        logger.info("RulesetStore loaded %d ruleset(s) from %s", len(self._rulesets), self._base)

    def reload(self) -> int:
        """Re-read the directory and swap in the new rulesets.

        If any file is defective the error propagates and the previously
        loaded rulesets stay in place.

        Returns:
            The number of rulesets now loaded.
        """
        fresh = self._read_all()
        self._rulesets = fresh
        logger.info("RulesetStore reloaded %d ruleset(s) from %s", len(fresh), self._base)
        return len(fresh)

    def put(self, ruleset: Ruleset) -> None:
        """Register (or replace) a programmatically built ruleset."""
        if ruleset.id is None:
            raise RulesetError("ruleset has no meta.id")
        self._rulesets = {**self._rulesets, ruleset.id: ruleset}

    def _read_all(self) -> dict[str, Ruleset]:
        if not self._base.is_dir():
            raise FileNotFoundError(f"Missing ruleset directory: {self._base}")

        loaded: dict[str, Ruleset] = {}
        paths = sorted(p for p in self._base.iterdir() if p.suffix in RULESET_SUFFIXES)
        for path in paths:
            ruleset = load_ruleset_file(path)
            if ruleset.id in loaded:
                raise RulesetError(f"duplicate ruleset id '{ruleset.id}'", source=str(path))
            loaded[ruleset.id] = ruleset
        return loaded

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def get(self, ruleset_id: str) -> Ruleset:
        """Return the ruleset with the given id.

        Raises:
            KeyError: if no ruleset with that id is loaded.
        """
        return self._rulesets[ruleset_id]

    def ids(self) -> list[str]:
        """Loaded ruleset ids in sorted order."""
        return sorted(self._rulesets)

    def all(self) -> list[Ruleset]:
        """Loaded rulesets in id order."""
        current = self._rulesets
        return [current[i] for i in sorted(current)]

    def __contains__(self, ruleset_id: object) -> bool:
        return ruleset_id in self._rulesets

    def __len__(self) -> int:
        return len(self._rulesets)
