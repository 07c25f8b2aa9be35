from jose import jwt, JWTError
from fastapi import HTTPException
import os

# Tokens are issued by the account service; this side only checks them.


def decode_token(token: str):
    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise HTTPException(status_code=500, detail="Token verification is not configured")

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[os.getenv("JWT_ALGORITHM", "HS256")]
        )
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    if "sub" not in payload or "role" not in payload:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    return payload


def require_role(token: str, role: str) -> str:
    payload = decode_token(token)
    if payload["role"] != role:
        raise HTTPException(status_code=403, detail=f"{role.capitalize()}s only")
    return payload["sub"]
