from __future__ import annotations

from calendar import timegm
from datetime import datetime, timedelta
from typing import Optional

import jwt

from ..common.datetime_utils import utc_now
from ..core.constants import TOKEN_ALGORITHM, TOKEN_TTL_HOURS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .model import Identity

INVALID_TOKEN = "Invalid or expired token"


class TokenService:
    """Stateless signed tokens.

    There is no revocation list: a token stays valid until it expires, even
    after the user logs out on the client.
    """

    def __init__(self, secret: str, *, ttl_hours: int = TOKEN_TTL_HOURS):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self._ttl = timedelta(hours=int(ttl_hours))

    def issue_token(self, identity: Identity, *, now: Optional[datetime] = None) -> str:
        issued_at = now or utc_now()
        payload = {
            "id": identity.id,
            "role": identity.role.value,
            "firstName": identity.first_name,
            "lastName": identity.last_name,
            "email": identity.email,
            "iat": issued_at,
            "exp": issued_at + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=TOKEN_ALGORITHM)

    def verify_token(self, token: str, *, now: Optional[datetime] = None) -> Identity:
        # Bad signature, expiry and malformed claims all look the same to the caller.
        clock = timegm((now or utc_now()).utctimetuple())
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[TOKEN_ALGORITHM],
                options={
                    "require": ["exp", "iat", "id", "role"],
                    # Time claims are checked below against the caller's clock.
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
            if clock >= int(payload["exp"]) or clock < int(payload["iat"]):
                raise jwt.ExpiredSignatureError("Token is outside its validity window")
            return Identity(
                id=int(payload["id"]),
                role=Role(payload["role"]),
                first_name=str(payload.get("firstName", "")),
                last_name=str(payload.get("lastName", "")),
                email=str(payload.get("email", "")),
            )
        except (jwt.PyJWTError, KeyError, TypeError, ValueError) as err:
            raise AuthenticationError(INVALID_TOKEN) from err
