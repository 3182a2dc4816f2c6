import itertools

import pytest
from hypothesis import given
from hypothesis import strategies as st

from git_relay.config import REQUIRED_KEYS, DeploymentTarget, parse_interval
from git_relay.daemon import TRANSITIONS, SyncEvent, SyncState, transition
from git_relay.errors import ConfigError

VALID = {
    "repo_path": "/srv/app",
    "remote_url": "https://example.com/app.git",
    "interval": 1000,
    "branch": "main",
}

# Strategy: any non-empty subset of the required keys to drop
dropped_keys = st.sets(st.sampled_from(REQUIRED_KEYS), min_size=1)


@given(dropped=dropped_keys, blank=st.booleans())
def test_config_missing_any_required_field_fails(
    dropped: set[str], blank: bool
) -> None:
    """
    Property: Removing (or blanking) any combination of required fields must
    fail to load, and the error must name every field that was dropped.
    """
    data = dict(VALID)
    for key in dropped:
        if blank:
            data[key] = ""
        else:
            del data[key]

    with pytest.raises(ConfigError) as excinfo:
        DeploymentTarget.from_dict(data)

    for key in dropped:
        assert key in str(excinfo.value)


@given(ms=st.integers(min_value=1, max_value=10**9))
def test_positive_interval_round_trips_through_units(ms: int) -> None:
    """
    Property: Any positive millisecond count is accepted as-is, and the
    second-based spelling of whole seconds is exactly 1000x larger.
    """
    assert parse_interval(ms) == ms
    assert parse_interval(f"{ms}ms") == ms
    assert parse_interval(f"{ms}s") == ms * 1000


def test_transition_is_defined_only_for_table_pairs() -> None:
    """
    Property: For every (state, event) pair, transition() either returns the
    table entry or raises ValueError; no pair leaves the loop in BOOTSTRAPPING.
    """
    for state, event in itertools.product(SyncState, SyncEvent):
        if (state, event) in TRANSITIONS:
            next_state = transition(state, event)
            assert next_state is TRANSITIONS[(state, event)]
            assert next_state is not SyncState.BOOTSTRAPPING
        else:
            with pytest.raises(ValueError):
                transition(state, event)
