"""
Guard Chain

Ordered precondition checks run before a route handler touches persistent state.

Each guard inspects a GuardContext and returns exactly one GuardOutcome:
- CONTINUE: control passes to the next guard (or the handler)
- respond(status_code, error): the request ends with {"error": error}

A guard cannot both continue and respond, and it cannot forget to do either:
the dispatcher is the only place that writes a response or calls the handler.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from fastapi import Request
from fastapi.responses import JSONResponse, Response
from sqlmodel import Session

from foodshare.utils.session_context import SessionContext

logger = logging.getLogger(__name__)


class GuardKind(str, Enum):
    session = "session"  # session liveness, always first
    syntax = "syntax"  # pure checks on the request payload
    auth = "auth"  # logged-in / logged-out state
    lookup = "lookup"  # needs a directory or collection read


@dataclass(frozen=True)
class GuardOutcome:
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def proceeds(self) -> bool:
        return self.status_code is None


CONTINUE = GuardOutcome()


def respond(status_code: int, error: str) -> GuardOutcome:
    return GuardOutcome(status_code=status_code, error=error)


def error_response(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error})


@dataclass
class GuardContext:
    db: Session
    user_session: SessionContext
    body: Dict[str, Any] = field(default_factory=dict)
    query: Mapping[str, str] = field(default_factory=dict)
    path: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_request(
        cls,
        request: Request,
        db: Session,
        body: Optional[Dict[str, Any]] = None,
        path: Optional[Dict[str, Any]] = None,
    ) -> "GuardContext":
        return cls(
            db=db,
            user_session=SessionContext.from_request(request),
            body=body or {},
            query=request.query_params,
            path=path or {},
        )


@dataclass(frozen=True)
class Guard:
    name: str
    kind: GuardKind
    check: Callable[[GuardContext], GuardOutcome]

    def __call__(self, ctx: GuardContext) -> GuardOutcome:
        outcome = self.check(ctx)
        if not isinstance(outcome, GuardOutcome):
            raise TypeError(f"Guard {self.name} returned {outcome!r} instead of a GuardOutcome")
        return outcome


def guard(kind: GuardKind) -> Callable[[Callable[[GuardContext], GuardOutcome]], Guard]:
    """Decorator turning a check function into a tagged Guard value"""

    def decorator(check: Callable[[GuardContext], GuardOutcome]) -> Guard:
        return Guard(name=check.__name__, kind=kind, check=check)

    return decorator


def when_present(key: str, inner: Guard) -> Guard:
    """Run `inner` only if `key` appears in the request body (partial updates)"""

    def check(ctx: GuardContext) -> GuardOutcome:
        if key not in ctx.body:
            return CONTINUE
        return inner(ctx)

    return Guard(name=f"{inner.name}[{key}?]", kind=inner.kind, check=check)


class GuardChain:
    """
    Fixed, ordered list of guards for one route.

    The first guard must be the session liveness guard so that no later guard
    reads a user id that points at a deleted account.
    """

    def __init__(self, *guards: Guard):
        if not guards or guards[0].kind is not GuardKind.session:
            raise ValueError("A guard chain must start with the session liveness guard")
        if any(g.kind is GuardKind.session for g in guards[1:]):
            raise ValueError("The session liveness guard may only appear first in a chain")
        self.guards: Tuple[Guard, ...] = guards

    def evaluate(self, ctx: GuardContext) -> GuardOutcome:
        """Run guards in order and stop at the first one that responds"""
        for g in self.guards:
            outcome = g(ctx)
            if not outcome.proceeds:
                logger.info("Guard %s rejected request: %d %s", g.name, outcome.status_code, outcome.error)
                return outcome
        return CONTINUE

    def run(self, ctx: GuardContext, handler: Callable[[GuardContext], Response]) -> Response:
        """Evaluate the chain, then call `handler` only if every guard continued"""
        outcome = self.evaluate(ctx)
        if not outcome.proceeds:
            return error_response(outcome.status_code, outcome.error)
        return handler(ctx)
