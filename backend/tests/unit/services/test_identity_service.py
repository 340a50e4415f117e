import pytest

from blog_api.models.user import Role
from blog_api.services._shared.base import ServiceContext
from blog_api.services._shared.errors import DuplicateIdentityError, NotFoundError
from blog_api.services.identity.service import IdentityService
from tests.factories.user import UserFactory


class TestIdentityService:
    """Profile reads and administrative account creation."""

    @pytest.fixture()
    def service(self) -> IdentityService:
        return IdentityService()

    def test_get_user_returns_public_fields(self, session, service):
        user = UserFactory(username="carol", email="carol@example.com")
        session.commit()

        out = service.get_user(user.id)

        assert out.id == user.id
        assert out.username == "carol"
        assert out.role == "user"
        assert not hasattr(out, "password_hash")

    def test_get_user_missing(self, session, service):
        with pytest.raises(NotFoundError):
            service.get_user(999_999)

    def test_me_uses_context_actor(self, session):
        user = UserFactory()
        session.commit()

        out = IdentityService(ctx=ServiceContext(actor_id=user.id, role="user")).me()

        assert out.id == user.id

    def test_me_without_actor(self, session, service):
        with pytest.raises(NotFoundError):
            service.me()

    def test_create_admin(self, session, service):
        out = service.create_admin(
            username="root", email="root@example.com", password_hash="digest"
        )

        assert out.role == Role.ADMIN.value
        assert out.id is not None

    def test_create_admin_duplicate(self, session, service):
        UserFactory(username="taken", email="taken@example.com")
        session.commit()

        with pytest.raises(DuplicateIdentityError):
            service.create_admin(
                username="taken", email="other@example.com", password_hash="digest"
            )
