"""User service: registration, lookup and pass assignment."""

import logging
from dataclasses import dataclass

from django.db import IntegrityError, transaction

from loyaltypass.adapters import get_pass_provider
from loyaltypass.exceptions import (
    ConflictError,
    NotFoundError,
    UpstreamServiceError,
    ValidationError,
)
from loyaltypass.gates import GateError, Gates
from loyaltypass.models import LoyaltyUser
from loyaltypass.protocols.passes import PassCreationRequest, PassCreationResult
from loyaltypass.services.rewards import RewardService
from loyaltypass.services.stats import UserStats, project_stats
from loyaltypass.signals import pass_assigned, user_registered
from loyaltypass.utils import normalize_phone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserDashboard:
    """Stats projection plus ledger-based reward availability."""

    stats: UserStats
    has_unclaimed_reward: bool
    unclaimed_rewards: int

    def as_dict(self) -> dict:
        data = self.stats.as_dict()
        data["has_unclaimed_reward"] = self.has_unclaimed_reward
        data["unclaimed_rewards"] = self.unclaimed_rewards
        return data


class UserService:
    """
    Service for loyalty users.

    Uses @classmethod for extensibility (consistent with other services).

    CORE:
        register(...)          - Create user and request a wallet pass
        get_by_id(id)          - Get user
        get_by_phone(phone)    - Get user by phone (normalized)
        get_with_stats(id)     - User + reward progress
        set_pass_serial(...)   - Assign pass serial (pass-creation webhook)
    """

    # ======================================================================
    # REGISTRATION
    # ======================================================================

    @classmethod
    def register(cls, first_name: str, last_name: str, phone_number: str) -> LoyaltyUser:
        """
        Register a new loyalty user and request their wallet pass.

        Args:
            first_name: First name (required)
            last_name: Last name (required)
            phone_number: Phone in any common format; stored as E.164

        Returns:
            Created LoyaltyUser (pass_serial_number set if the provider
            assigned one synchronously)

        Raises:
            ValidationError: Empty name or malformed phone
            ConflictError: Phone already registered
            UpstreamServiceError: Pass provider failed (nothing is persisted)
        """
        first_name = first_name.strip() if isinstance(first_name, str) else ""
        last_name = last_name.strip() if isinstance(last_name, str) else ""
        if not first_name:
            raise ValidationError("MISSING_FIELD", message="First name is required", field="first_name")
        if not last_name:
            raise ValidationError("MISSING_FIELD", message="Last name is required", field="last_name")

        phone = normalize_phone(phone_number)
        if not phone:
            raise ValidationError("INVALID_PHONE", phone_number=phone_number)

        try:
            Gates.phone_number_uniqueness(phone)
        except GateError as exc:
            raise ConflictError("DUPLICATE_PHONE", phone_number=phone) from exc

        with transaction.atomic():
            try:
                with transaction.atomic():
                    user = LoyaltyUser.objects.create(
                        first_name=first_name,
                        last_name=last_name,
                        phone_number=phone,
                    )
            except IntegrityError as exc:
                # Lost a race with a concurrent registration
                raise ConflictError("DUPLICATE_PHONE", phone_number=phone) from exc

            result = cls._request_pass(user)
            if result.pass_serial_number:
                user.pass_serial_number = result.pass_serial_number
                user.save(update_fields=["pass_serial_number", "updated_at"])

        logger.info("User registered: id=%s pass=%s", user.pk, user.pass_serial_number)
        user_registered.send(sender=LoyaltyUser, user=user)
        return user

    @classmethod
    def _request_pass(cls, user: LoyaltyUser) -> PassCreationResult:
        """Call the pass provider. Failure aborts the enclosing registration."""
        request = PassCreationRequest(
            user_id=user.pk,
            first_name=user.first_name,
            last_name=user.last_name,
            phone_number=user.phone_number,
        )
        try:
            result = get_pass_provider().create_pass(request)
        except Exception as exc:
            logger.exception("Pass provider raised for user %s", user.pk)
            raise UpstreamServiceError("PASS_CREATION_FAILED", user_id=user.pk) from exc

        if not result.success:
            logger.warning("Pass creation rejected for user %s: %s", user.pk, result.message)
            raise UpstreamServiceError(
                "PASS_CREATION_FAILED",
                message=result.message,
                user_id=user.pk,
            )
        return result

    # ======================================================================
    # LOOKUP
    # ======================================================================

    @classmethod
    def get_by_id(cls, user_id: int) -> LoyaltyUser | None:
        """Get user by primary key."""
        try:
            return LoyaltyUser.objects.get(pk=user_id)
        except LoyaltyUser.DoesNotExist:
            return None

    @classmethod
    def get_by_phone(cls, phone_number: str) -> LoyaltyUser | None:
        """Get user by phone (exact match on normalized E.164)."""
        phone = normalize_phone(phone_number)
        if not phone:
            return None
        try:
            return LoyaltyUser.objects.get(phone_number=phone)
        except LoyaltyUser.DoesNotExist:
            return None

    @classmethod
    def get_by_pass_serial(cls, pass_serial_number: str) -> LoyaltyUser | None:
        """Get the current holder of a pass."""
        if not pass_serial_number:
            return None
        try:
            return LoyaltyUser.objects.get(pass_serial_number=pass_serial_number)
        except LoyaltyUser.DoesNotExist:
            return None

    @classmethod
    def get_with_stats(cls, user_id: int) -> UserDashboard | None:
        """User with reward progress, or None if not found."""
        user = cls.get_by_id(user_id)
        if not user:
            return None
        unclaimed = len(RewardService.unclaimed_for_user(user.pk))
        return UserDashboard(
            stats=project_stats(user),
            has_unclaimed_reward=unclaimed > 0,
            unclaimed_rewards=unclaimed,
        )

    # ======================================================================
    # PASS
    # ======================================================================

    @classmethod
    def set_pass_serial(cls, user_id: int, pass_serial_number: str) -> LoyaltyUser:
        """
        Assign (or reassign) the user's pass serial.

        Raises:
            ValidationError: Empty serial
            NotFoundError: Unknown user
            ConflictError: Serial already held by another user
        """
        if not pass_serial_number or not pass_serial_number.strip():
            raise ValidationError(
                "MISSING_FIELD",
                message="Pass serial number is required",
                field="pass_serial_number",
            )

        try:
            with transaction.atomic():
                try:
                    user = LoyaltyUser.objects.select_for_update().get(pk=user_id)
                except LoyaltyUser.DoesNotExist:
                    raise NotFoundError(
                        "USER_NOT_FOUND",
                        message=f"User with ID {user_id} not found",
                        user_id=user_id,
                    )

                user.pass_serial_number = pass_serial_number
                user.save(update_fields=["pass_serial_number", "updated_at"])
        except IntegrityError as exc:
            raise ConflictError(
                "DUPLICATE_PASS_SERIAL",
                pass_serial_number=pass_serial_number,
            ) from exc

        pass_assigned.send(
            sender=LoyaltyUser,
            user=user,
            pass_serial_number=pass_serial_number,
        )
        return user
