import logging
from typing import Any, Dict, Optional

from spice_store.core.errors import TransientBackendError

logger = logging.getLogger("AUTH")
logger.setLevel(logging.INFO)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def resolve_caller(store, token: Optional[str]) -> Optional[Dict[str, Any]]:
    """Ask the auth service who owns ``token``.

    A rejected token yields ``None`` and a warning; the caller continues as a guest.
    Backend outages still propagate once the retries are used up.
    """
    if not token:
        return None
    try:
        return store.resolve_user(token)
    except TransientBackendError:
        raise
    except Exception as e:
        logger.warning(f"Could not verify user token: {e}")
        return None
