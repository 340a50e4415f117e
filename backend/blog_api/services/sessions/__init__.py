from .dto import LoginIn, LogoutIn, RefreshIn, RegisterIn, SessionInfoOut, SessionOut
from .service import SessionService

__all__ = [
    "LoginIn",
    "LogoutIn",
    "RefreshIn",
    "RegisterIn",
    "SessionInfoOut",
    "SessionOut",
    "SessionService",
]
