import pytest

from species_screening.engine import DecisionEngine
from species_screening.evaluator import ConditionMatcher
from species_screening.ruleset import RulesetStore

BEE_RULESET_ID = "rusty_patched_bumble_bee"


@pytest.fixture
def matcher():
    """Fresh ConditionMatcher for each test."""
    return ConditionMatcher()


@pytest.fixture
def engine():
    """Fresh DecisionEngine for each test."""
    return DecisionEngine()


@pytest.fixture(scope="session")
def store():
    """Load the shipped rulesets once for the entire test session."""
    s = RulesetStore()
    s.load()
    return s


@pytest.fixture(scope="session")
def bee_ruleset(store):
    return store.get(BEE_RULESET_ID)
