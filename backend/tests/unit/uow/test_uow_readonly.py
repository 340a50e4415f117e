import pytest
from sqlalchemy import func, select

from blog_api.models.user import User
from blog_api.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from blog_api.uow import SQLAlchemyUnitOfWork as RWuow
from tests.factories.user import UserFactory


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, session):
        """Flushing pending ORM changes inside the RO UoW raises."""
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(UserFactory.build())
            uow.session.flush()

    def test_allows_reads(self, session):
        with RWuow() as uow:
            uow.users.add(UserFactory.build())

        with ROuow() as uow:
            count = uow.session.execute(select(func.count(User.id))).scalar()
            assert count >= 1

    def test_disallows_commit(self, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_blocked_mutation_is_not_persisted(self, session):
        with RWuow() as uow:
            user = uow.users.add(UserFactory.build())
            user_id = user.id
            original_email = user.email

        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            u = uow.users.get(user_id)
            u.email = "mutated-in-ro@example.com"
            uow.session.flush()

        with ROuow() as uow:
            assert uow.users.get(user_id).email == original_email

    def test_enters_on_the_scoped_flask_session(self, session):
        """``db.session`` is a scoped_session proxy; entering must not touch it directly."""
        from sqlalchemy.orm import scoped_session

        from blog_api.core.extensions import db

        assert isinstance(db.session, scoped_session)
        with ROuow() as uow:
            assert uow.users.get(-1) is None

    def test_keeps_an_outer_transaction_open(self, session):
        user = UserFactory.build()
        session.add(user)
        session.flush()

        with ROuow() as uow:
            assert uow.users.get(user.id) is user

        assert user in session
        assert session.get(User, user.id) is user
