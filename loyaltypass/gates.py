"""
Loyaltypass Gates - Validation rules.

G1: PhoneUniqueness - a phone number belongs to at most one user
G2: ProviderEventAuthenticity - Webhook is authentic (HMAC + timestamp)
G3: ReplayProtection - Event cannot be processed twice (persistent via DB)
"""

import hashlib
import hmac
import logging
import time
from dataclasses import dataclass

from django.db import IntegrityError, transaction

logger = logging.getLogger(__name__)


class GateError(Exception):
    """Gate validation error."""

    def __init__(self, gate_name: str, message: str, details: dict | None = None):
        self.gate_name = gate_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{gate_name}] {message}")


@dataclass
class GateResult:
    """Result of a gate check."""

    passed: bool
    gate_name: str
    message: str = ""


# =============================================================================
# Gates
# =============================================================================


class Gates:
    """Loyaltypass validation gates."""

    # =========================================================================
    # G1: Phone Uniqueness
    # =========================================================================

    @classmethod
    def phone_number_uniqueness(cls, phone_number: str) -> GateResult:
        """
        G1: A normalized phone number cannot belong to another user.

        Args:
            phone_number: E.164 phone number

        Raises:
            GateError: If the phone is already registered
        """
        from loyaltypass.models import LoyaltyUser

        existing = LoyaltyUser.objects.filter(phone_number=phone_number).first()
        if existing:
            raise GateError(
                "G1_PhoneUniqueness",
                "Phone number already registered.",
                {"existing_user_id": existing.pk},
            )

        return GateResult(True, "G1_PhoneUniqueness")

    # =========================================================================
    # G2: Provider Event Authenticity (HMAC validation for webhooks)
    # =========================================================================

    @classmethod
    def provider_event_authenticity(
        cls,
        body: bytes,
        signature: str,
        secret: str,
        timestamp: int | None = None,
        max_age_seconds: int = 300,
    ) -> GateResult:
        """
        G2: Webhook is authentic (HMAC + timestamp validation).

        The pass provider signs the raw body:
        - Header: X-Pass-Signature
        - Format: sha256=<hex_digest> (prefix optional)
        - Optional X-Pass-Timestamp header (unix seconds) bounds the event age

        Args:
            body: Raw request body (bytes)
            signature: Signature from header
            secret: Webhook secret
            timestamp: Unix timestamp from header (optional)
            max_age_seconds: Maximum age of request (default 5 minutes)

        Raises:
            GateError: If signature is invalid or timestamp is too old
        """
        if not secret:
            logger.warning(
                "G2_ProviderEventAuthenticity: webhook secret is empty; "
                "all payloads are accepted without signature validation. "
                "Set LOYALTYPASS['PASS_WEBHOOK_SECRET'] before deploying to production."
            )
            return GateResult(
                True, "G2_ProviderEventAuthenticity", "No secret configured (skipped)"
            )

        if not signature:
            raise GateError(
                "G2_ProviderEventAuthenticity",
                "Missing signature header.",
            )

        if signature.startswith("sha256="):
            signature = signature[7:]

        expected = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()

        if not hmac.compare_digest(signature.lower(), expected.lower()):
            raise GateError(
                "G2_ProviderEventAuthenticity",
                "Invalid signature.",
            )

        if timestamp:
            age = abs(int(time.time()) - timestamp)
            if age > max_age_seconds:
                raise GateError(
                    "G2_ProviderEventAuthenticity",
                    f"Timestamp too old ({age}s > {max_age_seconds}s).",
                    {"age_seconds": age},
                )

        return GateResult(True, "G2_ProviderEventAuthenticity")

    # =========================================================================
    # G3: Replay Protection (persistent via DB)
    # =========================================================================

    @classmethod
    def replay_protection(
        cls,
        nonce: str,
        provider: str = "pass_scan",
    ) -> GateResult:
        """
        G3: Event cannot be processed twice (persistent via DB).

        Args:
            nonce: Unique event identifier from the provider
            provider: Provider name for categorization

        Raises:
            GateError: If event was already processed
        """
        from loyaltypass.models import ProcessedEvent

        if not nonce:
            raise GateError(
                "G3_ReplayProtection",
                "Nonce is required.",
            )

        # Unique constraint on nonce rejects duplicates
        try:
            with transaction.atomic():
                ProcessedEvent.objects.create(nonce=nonce, provider=provider)
        except IntegrityError:
            if ProcessedEvent.objects.filter(nonce=nonce).exists():
                raise GateError(
                    "G3_ReplayProtection",
                    "Replay detected: event already processed.",
                    {"nonce": nonce, "provider": provider},
                )
            raise

        return GateResult(True, "G3_ReplayProtection")

