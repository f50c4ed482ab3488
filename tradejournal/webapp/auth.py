"""
Telegram WebApp initData validation via HMAC-SHA256.

See: core.telegram.org/bots/webapps#validating-data-received-via-the-mini-app

The payload is a query string signed by Telegram with a key derived from the
bot token. Nothing in it may be trusted until ``verify_init_data`` accepts it.
"""

import enum
import hashlib
import hmac
import logging
import time
from dataclasses import dataclass
from urllib.parse import parse_qsl

from pydantic import BaseModel, ConfigDict, StrictInt, ValidationError

logger = logging.getLogger("journal.auth")

WEBAPP_DATA_KEY = b"WebAppData"


class AuthFailure(enum.Enum):
    CONFIGURATION = "configuration"
    MALFORMED_PAYLOAD = "malformed_payload"
    SIGNATURE_MISMATCH = "signature_mismatch"
    EXPIRED = "expired"
    IDENTITY_MISSING = "identity_missing"


class TelegramUser(BaseModel):
    """Identity claim carried in the ``user`` field of initData."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: StrictInt
    first_name: str
    last_name: str | None = None
    username: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name or ''}".strip()


@dataclass(frozen=True)
class AuthResult:
    user: TelegramUser | None = None
    failure: AuthFailure | None = None

    @property
    def ok(self) -> bool:
        return self.user is not None


def parse_init_data(raw: str | None) -> dict[str, str]:
    """Decode a query string into a flat mapping; the last duplicate wins."""
    if not raw:
        return {}
    return dict(parse_qsl(raw, keep_blank_values=True))


def build_data_check_string(fields: dict[str, str]) -> str:
    return "\n".join(f"{key}={fields[key]}" for key in sorted(fields))


def compute_secret_key(bot_token: str) -> bytes:
    """HMAC-SHA256 of bot token with 'WebAppData' as key."""
    return hmac.new(WEBAPP_DATA_KEY, bot_token.encode("utf-8"), hashlib.sha256).digest()


def compute_hash(data_check_string: str, bot_token: str) -> str:
    return hmac.new(
        compute_secret_key(bot_token),
        data_check_string.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def check_init_data(raw: str | None, bot_token: str | None) -> AuthFailure | None:
    """Validate the initData signature.

    Returns ``None`` when the payload is authentic, otherwise the reason it
    was rejected. Never raises for attacker-controlled input.
    """
    if not isinstance(bot_token, str) or not bot_token:
        return AuthFailure.CONFIGURATION
    if not raw:
        return AuthFailure.MALFORMED_PAYLOAD

    try:
        fields = parse_init_data(raw)
    except (TypeError, ValueError) as e:
        logger.debug("initData is not a valid query string: %s", e)
        return AuthFailure.MALFORMED_PAYLOAD

    received_hash = fields.pop("hash", None)
    if not received_hash:
        return AuthFailure.MALFORMED_PAYLOAD

    calculated_hash = compute_hash(build_data_check_string(fields), bot_token)
    # compare_digest rejects non-ASCII str, so compare bytes
    if not hmac.compare_digest(
        calculated_hash.encode("utf-8"), received_hash.encode("utf-8")
    ):
        return AuthFailure.SIGNATURE_MISMATCH
    return None


def verify_init_data(raw: str | None, bot_token: str | None) -> bool:
    return check_init_data(raw, bot_token) is None


def decode_user(fields: dict[str, str]) -> TelegramUser | None:
    user_raw = fields.get("user")
    if not user_raw:
        return None
    try:
        return TelegramUser.model_validate_json(user_raw)
    except ValidationError as e:
        logger.debug("initData user field rejected: %s", e.error_count())
        return None


def extract_user(raw: str | None) -> TelegramUser | None:
    """Pull the identity claim out of initData. Does not verify the signature."""
    try:
        fields = parse_init_data(raw)
    except (TypeError, ValueError):
        return None
    return decode_user(fields)


def is_fresh(fields: dict[str, str], max_age: int, now: float | None = None) -> bool:
    try:
        auth_date = int(fields["auth_date"])
    except (KeyError, ValueError):
        return False
    current = time.time() if now is None else now
    return current - auth_date <= max_age


def authenticate(
    raw: str | None,
    bot_token: str | None,
    max_age: int = 0,
    now: float | None = None,
) -> AuthResult:
    """Full initData check: signature, optional freshness, identity claim.

    ``max_age`` is the maximum allowed age of ``auth_date`` in seconds;
    0 disables the freshness check.
    """
    failure = check_init_data(raw, bot_token)
    if failure is not None:
        return AuthResult(failure=failure)

    fields = parse_init_data(raw)
    if max_age > 0 and not is_fresh(fields, max_age, now):
        return AuthResult(failure=AuthFailure.EXPIRED)

    user = decode_user(fields)
    if user is None:
        return AuthResult(failure=AuthFailure.IDENTITY_MISSING)
    return AuthResult(user=user)
