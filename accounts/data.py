"""
Validated input handed from serializers to services.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RegisterData:
    name: str
    email: str
    password: str
    language: Optional[str] = None


@dataclass(frozen=True)
class LoginData:
    email: str
    password: str
    remember: bool = False


@dataclass(frozen=True)
class ResetPasswordData:
    token: str
    email: str
    password: str


@dataclass(frozen=True)
class UpdateAccountData:
    name: str
    email: str


@dataclass(frozen=True)
class UpdatePreferencesData:
    language: str
