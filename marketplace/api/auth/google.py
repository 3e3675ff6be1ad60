# marketplace/api/auth/google.py
import logging

from flask import current_app
from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests
from google.oauth2 import id_token

from marketplace.core.errors import APIError
from marketplace.core.exceptions import AuthenticationFailed

logger = logging.getLogger(__name__)

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


def verify_google_token(token):
    """Verify a Google ID token and return the profile fields we use"""
    client_id = current_app.config.get("GOOGLE_CLIENT_ID")
    if not client_id:
        raise APIError("Google OAuth not configured", status_code=500)

    try:
        idinfo = id_token.verify_oauth2_token(token, requests.Request(), client_id)
    except (ValueError, GoogleAuthError) as e:
        logger.warning(f"Google token verification failed: {str(e)}")
        raise AuthenticationFailed("Invalid Google token")

    if idinfo.get("iss") not in GOOGLE_ISSUERS:
        logger.warning(f"Invalid Google token issuer: {idinfo.get('iss')}")
        raise AuthenticationFailed("Invalid Google token")

    if not idinfo.get("email"):
        raise AuthenticationFailed("Google account has no email address")

    return {
        "sub": idinfo["sub"],
        "email": idinfo["email"].lower(),
        "email_verified": idinfo.get("email_verified", False),
        "name": idinfo.get("name")
        or " ".join(filter(None, [idinfo.get("given_name"), idinfo.get("family_name")])),
        "picture": idinfo.get("picture"),
    }
