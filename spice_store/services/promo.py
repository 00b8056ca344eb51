import logging
from typing import NamedTuple, Optional

from spice_store.core.errors import ConfigurationError

logger = logging.getLogger("PROMO")
logger.setLevel(logging.INFO)


class PromoResult(NamedTuple):
    valid: bool
    message: str


class PromoValidator:
    """Single configured promo code that waives the delivery charge."""

    def __init__(self, configured_code: Optional[str]):
        self.configured_code = (configured_code or "").strip()

    def validate(self, code: Optional[str]) -> PromoResult:
        if not self.configured_code:
            logger.error("PROMO_CODE is not configured; promo validation unavailable")
            raise ConfigurationError("PROMO_CODE not configured")
        candidate = (code or "").strip().upper()
        if candidate and candidate == self.configured_code.upper():
            return PromoResult(True, "Promo valid")
        return PromoResult(False, "Promo invalid")

    def is_valid(self, code: Optional[str]) -> bool:
        return self.validate(code).valid
