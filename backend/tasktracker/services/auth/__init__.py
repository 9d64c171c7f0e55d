from .dto import LoginIn, LogoutIn, PrincipalOut, RefreshIn, RegisterIn, RegistrationOut, TokenPairOut
from .service import SessionService

__all__ = [
    "LoginIn",
    "LogoutIn",
    "PrincipalOut",
    "RefreshIn",
    "RegisterIn",
    "RegistrationOut",
    "SessionService",
    "TokenPairOut",
]
