# blog_api/services/_shared/base.py
from __future__ import annotations

from dataclasses import dataclass

from blog_api.services._shared.policies.common import ensure_can_modify
from blog_api.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data (auth, request ids, etc.).

    :param actor_id: Authenticated user identifier.
    :param role: Role claim of the authenticated user.
    :param request_id: Correlation id for logging/tracing.
    """

    actor_id: int | None = None
    role: str | None = None
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Offer shared authorization helpers.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    - Errors are raised as :mod:`blog_api.services._shared.errors` types and
      translated once at the HTTP edge.
    """

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context (auth, tracing).
        :type ctx: ServiceContext | None
        """
        self.ctx = ctx or ServiceContext()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork()

    # --------------------------- AuthZ --------------------------------

    def ensure_can_modify(self, owner_id: int, *, msg: str | None = None) -> None:
        """
        Ensure the current actor owns the resource or is an admin.

        :param owner_id: Owner of the target resource.
        :param msg: Optional custom error message.
        :raises AuthorizationError: If the actor may not modify the resource.
        """
        ensure_can_modify(
            role=self.ctx.role, subject_id=self.ctx.actor_id, owner_id=owner_id, msg=msg
        )
