"""Guards — turn pure-core verdicts into raised StorefrontErrors at the service boundary.

Invariants:
    - _enforce() is the ONLY place an AccessDecision DENY becomes ForbiddenError
    - require_identifier() runs before any store query; malformed ids never reach the DB
    - Every deny is logged with the actor id and reason, never swallowed
"""

import logging
from uuid import UUID

from app.core.access_control import AccessDecision, Operation, decide, role_gate
from app.core.domain_types import Role
from app.core.errors import ErrorContext, ForbiddenError, InvalidIdentifierError
from app.core.identifiers import parse_identifier
from app.core.repository_protocols import UserLike

logger = logging.getLogger(__name__)


def authorize(
    actor: UserLike, operation: Operation, resource_owner_id: UUID | None = None,
) -> None:
    """Raise ForbiddenError unless access control allows actor to perform operation."""
    _enforce(
        actor, operation,
        decide(Role(actor.role), actor.id, resource_owner_id, operation),
    )


def authorize_role(actor: UserLike, operation: Operation) -> None:
    """Role gate only, for checks that run before the resource is loaded."""
    _enforce(actor, operation, role_gate(Role(actor.role), operation))


def _enforce(
    actor: UserLike, operation: Operation, decision: AccessDecision,
) -> None:
    if decision.allowed:
        return
    logger.warning(
        f"Access denied for {operation.value}: {decision.reason}",
        extra={"user_id": actor.id},
    )
    raise ForbiddenError(
        decision.reason or "Not authorized",
        ErrorContext(user_id=str(actor.id)),
    )


def require_identifier(raw: object, resource_type: str) -> UUID:
    """Parse raw as an identifier or raise InvalidIdentifierError (400)."""
    parsed = parse_identifier(raw)
    if parsed is None:
        raise InvalidIdentifierError(resource_type)
    return parsed
