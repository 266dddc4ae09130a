"""
Tests for the guard chain dispatcher.

Validates:
- Guards run in order and the first rejection wins
- The handler runs only when every guard continues
- Chains must start with the session liveness guard
- when_present skips a guard for omitted keys
"""

import pytest
from fastapi.responses import JSONResponse

from foodshare.utils.guard_chain import (
    CONTINUE,
    Guard,
    GuardChain,
    GuardContext,
    GuardKind,
    guard,
    respond,
    when_present,
)
from foodshare.utils.session_context import SessionContext
from foodshare.utils.user_guards import is_current_session_user_exists, is_valid_username


def _ctx(body=None) -> GuardContext:
    # Anonymous session: the liveness guard never touches the db
    return GuardContext(db=None, user_session=SessionContext({}), body=body or {})


def _recording_guard(name, calls, outcome=CONTINUE, kind=GuardKind.syntax) -> Guard:
    def check(ctx):
        calls.append(name)
        return outcome

    return Guard(name=name, kind=kind, check=check)


def _ok_handler(ctx):
    return JSONResponse(status_code=200, content={"ok": True})


def test_all_guards_continue_runs_handler_once():
    calls = []
    chain = GuardChain(
        is_current_session_user_exists,
        _recording_guard("a", calls),
        _recording_guard("b", calls),
    )
    handled = []

    def handler(ctx):
        handled.append(True)
        return _ok_handler(ctx)

    response = chain.run(_ctx(), handler)

    assert response.status_code == 200
    assert calls == ["a", "b"]
    assert handled == [True]


def test_first_rejection_stops_chain_and_skips_handler():
    calls = []
    chain = GuardChain(
        is_current_session_user_exists,
        _recording_guard("a", calls),
        _recording_guard("b", calls, outcome=respond(409, "conflict")),
        _recording_guard("c", calls, outcome=respond(400, "never reached")),
    )

    def handler(ctx):
        raise AssertionError("handler must not run")

    response = chain.run(_ctx(), handler)

    assert response.status_code == 409
    assert response.body == b'{"error":"conflict"}'
    assert calls == ["a", "b"]


def test_evaluate_returns_outcome_without_handler():
    chain = GuardChain(is_current_session_user_exists, _recording_guard("a", [], outcome=respond(403, "nope")))

    outcome = chain.evaluate(_ctx())

    assert not outcome.proceeds
    assert outcome.status_code == 403
    assert outcome.error == "nope"


def test_chain_requires_session_guard_first():
    with pytest.raises(ValueError):
        GuardChain(is_valid_username)
    with pytest.raises(ValueError):
        GuardChain()
    with pytest.raises(ValueError):
        GuardChain(is_current_session_user_exists, is_current_session_user_exists)


def test_guard_returning_non_outcome_is_a_defect():
    bad = Guard(name="bad", kind=GuardKind.syntax, check=lambda ctx: None)
    chain = GuardChain(is_current_session_user_exists, bad)

    with pytest.raises(TypeError):
        chain.run(_ctx(), _ok_handler)


def test_guard_decorator_tags_kind_and_name():
    @guard(GuardKind.auth)
    def always_ok(ctx):
        return CONTINUE

    assert isinstance(always_ok, Guard)
    assert always_ok.kind is GuardKind.auth
    assert always_ok.name == "always_ok"


def test_when_present_skips_missing_key():
    optional_username = when_present("username", is_valid_username)

    assert optional_username(_ctx({})).proceeds
    assert optional_username(_ctx({"username": "alice"})).proceeds

    rejected = optional_username(_ctx({"username": "not valid"}))
    assert rejected.status_code == 400
    assert optional_username.kind is GuardKind.syntax
