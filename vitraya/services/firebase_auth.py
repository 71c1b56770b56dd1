"""
Firebase Authentication - verify ID tokens from Google Sign-In.

The Admin SDK is initialised lazily from the FIREBASE_SERVICE_ACCOUNT_JSON
environment variable. Without it no token can be verified and every
sign-in attempt is rejected.
"""
import json
import logging
import os
from typing import Optional

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin import exceptions as firebase_exceptions

logger = logging.getLogger("uvicorn.error")

_firebase_initialized = False


def _init_firebase() -> bool:
    """Initialize Firebase Admin SDK from env var."""
    global _firebase_initialized
    if _firebase_initialized:
        return True

    credentials_json = os.environ.get("FIREBASE_SERVICE_ACCOUNT_JSON")
    if not credentials_json:
        logger.warning("firebase_not_configured detail=FIREBASE_SERVICE_ACCOUNT_JSON not set")
        return False

    try:
        cred = credentials.Certificate(json.loads(credentials_json))
        firebase_admin.initialize_app(cred)
    except ValueError as exc:
        logger.error("firebase_init_error detail=%s", str(exc))
        return False
    _firebase_initialized = True
    logger.info("firebase_initialized")
    return True


def verify_id_token(id_token: str) -> Optional[dict]:
    """
    Verify a Firebase ID token and return its decoded claims.

    Returns:
        dict with uid, email, name, picture, etc. or None if invalid.
    """
    if not id_token or not _init_firebase():
        return None
    try:
        return auth.verify_id_token(id_token)
    except (ValueError, firebase_exceptions.FirebaseError) as exc:
        logger.warning("firebase_token_rejected detail=%s", str(exc))
        return None
