import hashlib
import hmac
import json
import logging
import time
from datetime import datetime, timedelta
from typing import Dict, Optional
from urllib.parse import parse_qsl

from jose import jwt, JWTError
from app.core import config
from app.core.clock import utcnow

logger = logging.getLogger(__name__)


def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = utcnow() + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict]:
    """Return the JWT payload, or None if the token is invalid or expired."""
    try:
        return jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError as e:
        logger.debug(f"Rejected bearer token: {e}")
        return None


def sign_init_data(fields: Dict[str, str], bot_token: str) -> str:
    """
    Compute the Telegram WebApp hash for a set of initData fields.

    data_check_string is every key=value pair except hash, sorted by key and
    joined with newlines; the key is HMAC_SHA256("WebAppData", bot_token).
    """
    data_check_string = "\n".join(f"{k}={fields[k]}" for k in sorted(fields))
    secret_key = hmac.new(b"WebAppData", bot_token.encode("utf-8"), hashlib.sha256).digest()
    return hmac.new(secret_key, data_check_string.encode("utf-8"), hashlib.sha256).hexdigest()


def validate_init_data(
    init_data: str,
    bot_token: Optional[str] = None,
    max_age_seconds: Optional[int] = None,
    now: Optional[float] = None,
) -> Optional[Dict]:
    """
    Validate Telegram Mini App initData.

    Args:
        init_data: Raw query string from Telegram.WebApp.initData
        bot_token: Bot token; defaults to TELEGRAM_BOT_TOKEN
        max_age_seconds: Reject data older than this; 0 disables the check
        now: Unix time override

    Returns:
        Parsed fields with "user" decoded from JSON, or None when the data is
        malformed, unsigned, tampered with or stale.
    """
    bot_token = bot_token or config.TELEGRAM_BOT_TOKEN
    if max_age_seconds is None:
        max_age_seconds = config.INIT_DATA_MAX_AGE_SECONDS
    if not init_data or not bot_token:
        return None

    try:
        fields = dict(parse_qsl(init_data, strict_parsing=True))
    except ValueError:
        return None

    received_hash = fields.pop("hash", None)
    if not received_hash:
        return None
    if not hmac.compare_digest(sign_init_data(fields, bot_token), received_hash):
        return None

    if max_age_seconds:
        try:
            auth_date = int(fields.get("auth_date", "0"))
        except ValueError:
            return None
        current = time.time() if now is None else now
        if current - auth_date > max_age_seconds:
            logger.info("Rejected stale initData")
            return None

    if "user" in fields:
        try:
            fields["user"] = json.loads(fields["user"])
        except json.JSONDecodeError:
            return None
    return fields
