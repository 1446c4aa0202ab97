"""Application settings read from the environment.

Protean's own settings (databases, event processing) live in ``domain.toml``;
these are the knobs specific to the StallionWear core.
"""

import os
from dataclasses import dataclass

MAX_CART_QUANTITY = 99
AMOUNT_EPSILON = 0.01

PAYMENT_METHODS = ("CashOnDelivery", "Stripe", "PayPal")


def get_environment() -> str:
    """Return the normalized environment name."""
    return (
        os.getenv("STALLIONWEAR_ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development"
    ).lower()


def is_production() -> bool:
    return get_environment() in ("production", "staging")


@dataclass(frozen=True)
class Settings:
    environment: str = "development"
    log_level: str | None = None
    media_backend: str = "fake"
    media_root: str = "media"
    media_base_url: str = "http://localhost:8000/media"
    media_folder: str = "StallionWear"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            environment=get_environment(),
            log_level=os.getenv("LOG_LEVEL"),
            media_backend=os.getenv("MEDIA_BACKEND", "fake").lower(),
            media_root=os.getenv("MEDIA_ROOT", "media"),
            media_base_url=os.getenv("MEDIA_BASE_URL", "http://localhost:8000/media"),
            media_folder=os.getenv("MEDIA_FOLDER", "StallionWear"),
        )
