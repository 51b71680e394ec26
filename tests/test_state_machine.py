import pytest

from common.exceptions import IllegalTransitionError
from modules.order.state_machine import (
    HAPPY_PATH, OrderStatus, TransitionPolicy,
    allowed_targets, can_transition, parse_policy, validate_transition,
)

P = TransitionPolicy.PERMISSIVE
S = TransitionPolicy.SEQUENTIAL


def test_happy_path_walks_under_both_policies():
    for policy in (P, S):
        for current, target in zip(HAPPY_PATH, HAPPY_PATH[1:]):
            assert validate_transition(current, target, policy) == target


def test_permissive_allows_skipping_forward():
    assert validate_transition("pending", "delivered", P) == OrderStatus.DELIVERED
    assert can_transition("confirmed", "out_for_delivery", P)


def test_sequential_rejects_skipping():
    with pytest.raises(IllegalTransitionError) as exc:
        validate_transition("pending", "preparing", S)
    assert exc.value.current == "pending"
    assert exc.value.target == "preparing"


@pytest.mark.parametrize("policy", [P, S])
@pytest.mark.parametrize("current", ["pending", "confirmed", "preparing", "out_for_delivery"])
def test_any_open_status_can_be_cancelled(policy, current):
    assert validate_transition(current, "cancelled", policy) == OrderStatus.CANCELLED


@pytest.mark.parametrize("policy", [P, S])
def test_backward_and_same_status_rejected(policy):
    with pytest.raises(IllegalTransitionError):
        validate_transition("preparing", "confirmed", policy)
    with pytest.raises(IllegalTransitionError):
        validate_transition("preparing", "preparing", policy)


@pytest.mark.parametrize("terminal", ["delivered", "cancelled"])
def test_terminal_statuses_never_change(terminal):
    assert allowed_targets(terminal, P) == frozenset()
    for target in OrderStatus:
        with pytest.raises(IllegalTransitionError) as exc:
            validate_transition(terminal, target, P)
        assert exc.value.current == terminal


def test_unknown_target_is_illegal():
    with pytest.raises(IllegalTransitionError) as exc:
        validate_transition("pending", "shipped", P)
    assert exc.value.target == "shipped"
    assert exc.value.status_code == 409


def test_parse_policy():
    assert parse_policy(" Sequential ") == S
    with pytest.raises(ValueError):
        parse_policy("lenient")
