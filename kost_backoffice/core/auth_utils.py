from jose import jwt, JWTError
from fastapi import HTTPException

from kost_backoffice.core.config import JWT_SECRET, JWT_ALGORITHM


def decode_token(token: str):
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM]
        )

        if "sub" not in payload or "role" not in payload:
            raise HTTPException(status_code=401, detail="Invalid token payload")

        return payload

    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")


def require_admin(token: str):
    payload = decode_token(token)

    if payload["role"] != "admin":
        raise HTTPException(status_code=403, detail="Admins only")

    return payload["sub"]
