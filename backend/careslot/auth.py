# backend/careslot/auth.py
"""
Caller identity.

Authentication happens upstream: the gateway verifies the session and
forwards the user as X-User-Id / X-User-Role headers.
"""

from dataclasses import dataclass

from fastapi import Header, HTTPException, status

ROLES = ("patient", "provider")


@dataclass(frozen=True)
class Identity:
    user_id: int
    role: str

    @property
    def is_provider(self) -> bool:
        return self.role == "provider"

    @property
    def is_patient(self) -> bool:
        return self.role == "patient"


def get_identity(
    x_user_id: int | None = Header(None),
    x_user_role: str | None = Header(None),
) -> Identity:
    if x_user_id is None or not x_user_role:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Missing user identity")
    if x_user_role not in ROLES:
        raise HTTPException(status.HTTP_403_FORBIDDEN, f"Unknown role {x_user_role!r}")
    return Identity(user_id=x_user_id, role=x_user_role)


def require_provider(identity: Identity, provider_id: int) -> None:
    if not identity.is_provider or identity.user_id != provider_id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Only the provider may do this")
