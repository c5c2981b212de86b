import os
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)

auth_scheme = HTTPBearer(auto_error=False)

FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")
AUTH_DISABLED = os.getenv("AUTH_DISABLED", "false").lower() == "true"

firebase_initialized = False


def _init_firebase():
    global firebase_initialized
    if firebase_initialized:
        return
    import firebase_admin

    if not firebase_admin._apps:
        # ADC on GCP
        firebase_admin.initialize_app()
    firebase_initialized = True


def verify_token(id_token: str) -> dict:
    """Decode a Firebase ID token into ``{"uid", "email"}``."""
    if AUTH_DISABLED:
        return {"uid": "dev-user", "email": None}
    try:
        _init_firebase()
        from firebase_admin import auth

        decoded = auth.verify_id_token(id_token)
        if FIREBASE_PROJECT_ID and decoded.get("aud") != FIREBASE_PROJECT_ID:
            raise ValueError("Invalid audience")
    except Exception as e:
        logger.info("Rejected ID token: %s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}")
    return {"uid": decoded["uid"], "email": decoded.get("email")}


def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(auth_scheme)):
    if AUTH_DISABLED:
        return verify_token("")
    if not credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing Authorization")
    return verify_token(credentials.credentials)
