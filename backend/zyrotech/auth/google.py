"""Google ID-token verification."""
import asyncio
import logging
from typing import Any, Dict, List

from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from zyrotech.auth.exceptions import InvalidGoogleTokenError
from zyrotech.core.settings import settings

logger = logging.getLogger(__name__)

# Reused between calls so Google's certificates are fetched over one session
_transport = google_requests.Request()


def _verify(token: str, client_ids: List[str]) -> Dict[str, Any]:
    if not client_ids:
        raise ValueError("No Google client IDs configured")
    payload = id_token.verify_oauth2_token(token, _transport)
    if payload.get("aud") not in client_ids:
        raise ValueError("Token audience is not an accepted client ID")
    return payload


async def verify_google_id_token(token: str) -> Dict[str, Any]:
    """
    Verify a Google ID token against the configured client IDs.

    The google-auth library is synchronous, so verification runs in a worker
    thread.

    Args:
        token: ID token issued to a client app

    Returns:
        Dict[str, Any]: Verified claims (``sub``, ``email``, ``name``, ``picture``)

    Raises:
        InvalidGoogleTokenError: If the token cannot be verified
    """
    try:
        return await asyncio.to_thread(_verify, token, settings.google.CLIENT_IDS)
    except (ValueError, GoogleAuthError) as e:
        logger.warning(f"[AUTH] Google token verification failed: {e}")
        raise InvalidGoogleTokenError() from e
