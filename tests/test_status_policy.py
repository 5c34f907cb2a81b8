import logging

import pytest

from hoardingadmin_firestoredb.utils.error_codes import ErrorCodes
from hoardingadmin_firestoredb.utils.status_policy import TransitionPolicy, validate_payment_status, validate_status_transition


@pytest.mark.parametrize(
    "current,target",
    [("Pending", "Approved"), ("Pending", "Rejected"), ("Approved", "Rejected"), ("Rejected", "Approved"), ("Approved", "Pending")],
)
def test_permissive_allows_any_move(current, target):
    assert validate_status_transition(current, target, TransitionPolicy.PERMISSIVE) is None


@pytest.mark.parametrize("policy", list(TransitionPolicy))
def test_same_status_is_allowed_under_every_policy(policy):
    assert validate_status_transition("Approved", "Approved", policy) is None
    assert validate_status_transition("approved", "APPROVED", policy) is None


def test_strict_only_decides_pending_bookings():
    assert validate_status_transition("Pending", "Approved", TransitionPolicy.STRICT) is None
    assert validate_status_transition(None, "Rejected", TransitionPolicy.STRICT) is None

    rejection = validate_status_transition("Approved", "Rejected", TransitionPolicy.STRICT)
    assert rejection.code == ErrorCodes.CONFLICT
    assert "Approved" in rejection.error_message


def test_unknown_or_missing_target_is_rejected():
    assert validate_status_transition("Pending", "Cancelled").code == ErrorCodes.BAD_REQUEST
    assert validate_status_transition("Pending", "").code == ErrorCodes.BAD_REQUEST
    assert validate_status_transition("Pending", None).code == ErrorCodes.BAD_REQUEST


def test_policy_from_config():
    assert TransitionPolicy.from_config("STRICT") == TransitionPolicy.STRICT
    assert TransitionPolicy.from_config(" permissive ") == TransitionPolicy.PERMISSIVE
    assert TransitionPolicy.from_config("bogus") == TransitionPolicy.PERMISSIVE


def test_mistyped_policy_falls_back_with_a_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="hoardingadmin"):
        policy = TransitionPolicy.from_config("stricct")

    assert policy == TransitionPolicy.PERMISSIVE
    assert "Unknown status transition policy 'stricct'" in caplog.text


def test_payment_status_validation():
    assert validate_payment_status("paid") is None
    assert validate_payment_status("Unpaid") is None
    assert validate_payment_status("refunded").code == ErrorCodes.BAD_REQUEST
    assert validate_payment_status(" ").code == ErrorCodes.BAD_REQUEST
