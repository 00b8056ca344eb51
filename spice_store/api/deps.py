from typing import Any, Dict, Optional

from fastapi import Depends, Header, HTTPException, status

from spice_store.core.config import Settings, get_settings
from spice_store.core.security import bearer_token, resolve_caller
from spice_store.db.supabase import SupabaseStore, get_client
from spice_store.services.notifications import NotificationDispatcher, ResendMailer
from spice_store.services.promo import PromoValidator


def get_store(settings: Settings = Depends(get_settings)) -> SupabaseStore:
    return SupabaseStore(get_client(), attempts=settings.RETRY_ATTEMPTS)


def get_promo_validator(settings: Settings = Depends(get_settings)) -> PromoValidator:
    return PromoValidator(settings.PROMO_CODE)


def get_dispatcher(settings: Settings = Depends(get_settings)) -> NotificationDispatcher:
    mailer = ResendMailer(settings.RESEND_API_KEY, settings.FROM_EMAIL)
    return NotificationDispatcher(mailer, admin_email=settings.ADMIN_EMAIL)


def get_optional_user(
    authorization: Optional[str] = Header(None),
    store=Depends(get_store),
) -> Optional[Dict[str, Any]]:
    return resolve_caller(store, bearer_token(authorization))


def get_current_user(user: Optional[Dict[str, Any]] = Depends(get_optional_user)) -> Dict[str, Any]:
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_admin_user(user=Depends(get_current_user), store=Depends(get_store)):
    if not store.is_admin(user["id"]):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return user
