from __future__ import annotations

from blog_api.services._shared.errors import AuthorizationError

ADMIN_ROLE = "admin"


def is_owner(*, actor_id, owner_id) -> bool:
    """Return True if the actor owns the resource."""
    if actor_id is None or owner_id is None:
        return False
    return str(actor_id) == str(owner_id)


def is_admin(role) -> bool:
    """Return True for the administrative role (enum member or raw string)."""
    return str(getattr(role, "value", role)) == ADMIN_ROLE


def can_modify(*, role, subject_id, owner_id) -> bool:
    """
    Decide whether ``subject_id`` acting with ``role`` may change a resource
    owned by ``owner_id``.

    Pure function with no request context: owners may modify their own
    resources, admins may modify anything.

    :param role: Role of the acting subject (``"user"`` or ``"admin"``).
    :param subject_id: Acting user id.
    :param owner_id: Owner of the target resource.
    :returns: ``True`` when the modification is allowed.
    """
    return is_admin(role) or is_owner(actor_id=subject_id, owner_id=owner_id)


def ensure_can_modify(*, role, subject_id, owner_id, msg: str | None = None) -> None:
    """
    Raise unless :func:`can_modify` allows the action.

    :raises AuthorizationError: If the subject is neither owner nor admin.
    """
    if not can_modify(role=role, subject_id=subject_id, owner_id=owner_id):
        raise AuthorizationError(msg)
