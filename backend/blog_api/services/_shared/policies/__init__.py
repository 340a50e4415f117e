from .common import can_modify, ensure_can_modify, is_admin, is_owner

__all__ = ["can_modify", "ensure_can_modify", "is_admin", "is_owner"]
