"""Relational refresh store built on the SQLAlchemy Unit of Work."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from blog_api.models.refresh_token import RefreshToken
from blog_api.services._shared.errors import ConflictError, StoreError
from blog_api.services._shared.ports.refresh_token_store import (
    ConsumeOutcome,
    ConsumeResult,
    RefreshGrant,
    RefreshTokenStore,
    RefreshTokenView,
    as_utc,
    classify_failure,
    hash_token,
)
from blog_api.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _to_view(row: RefreshToken) -> RefreshTokenView:
    return RefreshTokenView(
        token_hash=row.token_hash,
        user_id=row.user_id,
        issued_at=as_utc(row.issued_at),
        expires_at=as_utc(row.expires_at),
        consumed=row.consumed_at is not None,
        revoked=row.revoked_at is not None,
    )


class SQLRefreshTokenStore(RefreshTokenStore):
    """
    Refresh store persisted in the ``refresh_tokens`` table.

    Each operation runs in its own Unit of Work. Consumption is the
    conditional ``UPDATE`` of :meth:`RefreshTokenRepository.mark_consumed_if_valid`;
    the replacement row is inserted in the same transaction so either both
    changes commit or neither does.

    :param uow_factory: Callable returning a read-write Unit of Work.
    :param ro_uow_factory: Callable returning a read-only Unit of Work.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork,
        ro_uow_factory: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = (
            SQLAlchemyReadOnlyUnitOfWork
        ),
    ) -> None:
        self._uow = uow_factory
        self._ro_uow = ro_uow_factory

    # -------------------- helpers --------------------

    @staticmethod
    def _guard(op: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except IntegrityError as exc:
            raise ConflictError("RefreshToken") from exc
        except SQLAlchemyError as exc:
            logger.error("Refresh store failure", extra={"event": op})
            raise StoreError() from exc

    # -------------------- API ------------------------

    def create(
        self, *, token: str, user_id: int, expires_at: datetime, issued_at: datetime
    ) -> None:
        def _run() -> None:
            with self._uow() as uow:
                uow.refresh_tokens.add(
                    RefreshToken(
                        token_hash=hash_token(token),
                        user_id=user_id,
                        issued_at=as_utc(issued_at),
                        expires_at=as_utc(expires_at),
                    )
                )

        self._guard("create", _run)

    def consume(
        self, token: str, *, now: datetime, replacement: RefreshGrant | None = None
    ) -> ConsumeOutcome:
        key = hash_token(token)
        now = as_utc(now)

        def _run() -> ConsumeOutcome:
            with self._uow() as uow:
                repo = uow.refresh_tokens
                if repo.mark_consumed_if_valid(key, now=now):
                    row = repo.get_by_hash(key)
                    if row is None:
                        raise StoreError("Consumed refresh token row is missing")
                    user_id = row.user_id
                    if replacement is not None:
                        repo.add(
                            RefreshToken(
                                token_hash=hash_token(replacement.token),
                                user_id=user_id,
                                issued_at=as_utc(replacement.issued_at),
                                expires_at=as_utc(replacement.expires_at),
                            )
                        )
                    return ConsumeOutcome(ConsumeResult.OK, user_id)

                row = repo.get_by_hash(key)
                view = _to_view(row) if row is not None else None
                return ConsumeOutcome(
                    classify_failure(view, now), view.user_id if view else None
                )

        return self._guard("consume", _run)

    def revoke(self, token: str) -> bool:
        def _run() -> bool:
            with self._uow() as uow:
                return uow.refresh_tokens.revoke_by_hash(
                    hash_token(token), now=datetime.now(UTC)
                )

        return self._guard("revoke", _run)

    def revoke_all_for_user(self, user_id: int) -> int:
        def _run() -> int:
            with self._uow() as uow:
                return uow.refresh_tokens.revoke_all_for_user(user_id, now=datetime.now(UTC))

        return self._guard("revoke_all", _run)

    def get(self, token: str) -> RefreshTokenView | None:
        def _run() -> RefreshTokenView | None:
            with self._ro_uow() as uow:
                row = uow.refresh_tokens.get_by_hash(hash_token(token))
                return _to_view(row) if row is not None else None

        return self._guard("get", _run)

    def list_user_sessions(self, user_id: int) -> Iterable[RefreshTokenView]:
        def _run() -> list[RefreshTokenView]:
            with self._ro_uow() as uow:
                rows = uow.refresh_tokens.list_active_for_user(user_id, now=datetime.now(UTC))
                return [_to_view(r) for r in rows]

        return self._guard("list", _run)

    def purge_expired(self, now: datetime) -> int:
        def _run() -> int:
            with self._uow() as uow:
                return uow.refresh_tokens.delete_expired(now=as_utc(now))

        count = self._guard("purge", _run)
        logger.info("Purged expired refresh tokens", extra={"event": "purge", "count": count})
        return count
