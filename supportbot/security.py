"""
Webhook authentication for events forwarded by the Discord gateway relay.
The relay sends a shared secret in the X-Webhook-Secret header.
"""

import hashlib
import logging
import secrets
from typing import Any, Dict

from fastapi import HTTPException, Request

from . import config

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Webhook-Secret"


def hash_secret(secret: str) -> str:
    """Create a short SHA-256 fingerprint of a secret for logging (never log the raw value)."""
    return hashlib.sha256(secret.encode()).hexdigest()[:8]


def get_client_ip(request: Request) -> str:
    """Client address for security logs, preferring the proxy headers."""
    forwarded_for = request.headers.get('X-Forwarded-For')
    if forwarded_for:
        return forwarded_for.split(',')[0].strip()

    real_ip = request.headers.get('X-Real-IP')
    if real_ip:
        return real_ip.strip()

    return str(request.client.host) if request.client else "unknown"


def log_security_event(event_type: str, ip_address: str, details: Dict[str, Any]) -> None:
    log_entry = {"event": event_type, "ip": ip_address, **details}
    logger.warning(f"[SECURITY] {log_entry}")


def validate_webhook_auth(request: Request) -> bool:
    """
    Validate the shared secret header of an inbound event.

    Raises:
        HTTPException: 401 if the secret is missing or wrong, 503 if none is configured.
    """
    if not config.WEBHOOK_SECRET:
        logger.error("[SECURITY] WEBHOOK_SECRET is not configured, rejecting event")
        raise HTTPException(status_code=503, detail="Webhook secret not configured")

    client_ip = get_client_ip(request)
    provided = request.headers.get(SECRET_HEADER)

    if not provided:
        log_security_event("auth_failure_missing_secret", client_ip, {
            "user_agent": request.headers.get('User-Agent', 'unknown'),
        })
        raise HTTPException(status_code=401, detail="Authentication required")

    if not secrets.compare_digest(provided, config.WEBHOOK_SECRET):
        log_security_event("auth_failure_invalid_secret", client_ip, {
            "secret_hash": hash_secret(provided),
        })
        raise HTTPException(status_code=401, detail="Authentication failed")

    return True
