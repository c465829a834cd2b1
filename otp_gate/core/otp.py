"""
OTP issuance and verification.

OtpGate is the rate limiter and verifier for email one-time passwords. It keeps
no state of its own: every record lives in the injected KeyValueStore with its
own TTL.

Keys per identity (email):
- otp_lock:<email>           account lock after too many wrong codes
- otp_spam_lock:<email>      issuance lock after too many requests
- otp_cooldown:<email>       minimum gap between two issued codes
- otp:<email>                the active code
- otp_request_count:<email>  codes requested in the sliding window
- otp_attempts:<email>       wrong codes presented for the active code

Mail is dispatched before the code is written, so a code that was never
delivered is never stored.
"""

import logging
import secrets
from typing import Optional

from otp_gate.core.config import Settings, settings as default_settings
from otp_gate.core.exceptions import (
    AccountLockedError,
    CooldownError,
    EmailDeliveryError,
    ExpiredOrInvalidOtpError,
    IncorrectOtpError,
    SpamLockedError,
    TooManyRequestsError,
)
from otp_gate.core.store import KeyValueStore
from otp_gate.services.email_service import EmailService

logger = logging.getLogger(__name__)

OTP_MIN = 1000
OTP_MAX = 9999
OTP_SUBJECT = "Verify Your Email"
LOCK_SENTINEL = "locked"
USER_ACTIVATION_TEMPLATE = "user-activation-mail"
SELLER_ACTIVATION_TEMPLATE = "seller-activation-mail"


def lock_key(email: str) -> str:
    return f"otp_lock:{email}"


def spam_lock_key(email: str) -> str:
    return f"otp_spam_lock:{email}"


def cooldown_key(email: str) -> str:
    return f"otp_cooldown:{email}"


def otp_key(email: str) -> str:
    return f"otp:{email}"


def request_count_key(email: str) -> str:
    return f"otp_request_count:{email}"


def attempts_key(email: str) -> str:
    return f"otp_attempts:{email}"


def generate_otp() -> str:
    """
    Generate a 4-digit OTP in [1000, 9999].

    Uses the secrets module for cryptographic randomness.
    """
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


class OtpGate:
    """
    Rate limiting, cooldown and lockout state machine for email OTPs.

    Args:
        store: Key-value store with per-key TTL
        email_service: Mail collaborator used to deliver codes
        config: Settings holding the OTP_* TTLs and thresholds
    """

    def __init__(
        self,
        store: KeyValueStore,
        email_service: EmailService,
        config: Optional[Settings] = None
    ):
        self.store = store
        self.email_service = email_service
        self.config = config or default_settings

    def check_restrictions(self, email: str) -> None:
        """
        Refuse issuance while the identity is locked or cooling down.

        Checked in order of severity; the first record found wins.
        Never writes to the store.

        Raises:
            AccountLockedError: Too many wrong codes were presented
            SpamLockedError: Too many codes were requested
            CooldownError: A code was issued less than a cooldown ago
        """
        if self.store.get(lock_key(email)):
            raise AccountLockedError()

        if self.store.get(spam_lock_key(email)):
            raise SpamLockedError()

        if self.store.get(cooldown_key(email)):
            raise CooldownError()

    def track_otp_requests(self, email: str) -> None:
        """
        Count an OTP request against the sliding request window.

        The counter TTL is refreshed on every request. Once the count exceeds
        OTP_MAX_REQUESTS the spam lock is set.

        Raises:
            TooManyRequestsError: The request limit for the window is exhausted
        """
        count = self.store.incr(request_count_key(email), self.config.OTP_REQUEST_WINDOW_SECONDS)
        if count > self.config.OTP_MAX_REQUESTS:
            self.store.set(spam_lock_key(email), LOCK_SENTINEL, self.config.OTP_SPAM_LOCK_SECONDS)
            logger.warning(
                f"Spam lock set for {email} after {count} OTP requests",
                extra={"event": "otp_spam_locked", "email": email}
            )
            raise TooManyRequestsError()

    def send_otp(self, email: str, name: str, template: str = USER_ACTIVATION_TEMPLATE) -> None:
        """
        Generate a code, mail it, then store it with its cooldown.

        The code and the cooldown are written in one atomic step, so a store
        failure after delivery leaves neither behind.

        The failed-attempt counter is not reset here: wrong guesses made
        against an earlier code still count toward lockout until the counter
        expires (OTP_ATTEMPTS_WINDOW_SECONDS).

        Raises:
            EmailDeliveryError: The mail transport refused the message; nothing is stored
            StoreError: The code was mailed but could not be stored; it will not verify
        """
        otp = generate_otp()

        sent = self.email_service.send_email(
            to_email=email,
            subject=OTP_SUBJECT,
            template_id=template,
            template_data={"name": name, "otp": otp}
        )
        if not sent:
            logger.error(
                f"OTP email to {email} was not delivered; no code stored",
                extra={"event": "otp_mail_failed", "email": email}
            )
            raise EmailDeliveryError(f"Failed to send OTP email to {email}")

        # Overwrites any previous code
        self.store.set_many({
            otp_key(email): (otp, self.config.OTP_TTL_SECONDS),
            cooldown_key(email): ("true", self.config.OTP_COOLDOWN_SECONDS),
        })
        logger.info(f"OTP issued for {email}", extra={"event": "otp_issued", "email": email})

    def request_otp(self, email: str, name: str, template: str = USER_ACTIVATION_TEMPLATE) -> None:
        """Count the request and, if allowed, issue a new code."""
        self.track_otp_requests(email)
        self.send_otp(email, name, template)

    def _lock_account(self, email: str, failed_attempts: int) -> bool:
        """
        Lock the account and discard the active code.

        Only the attempt that creates the lock record performs the transition;
        racing attempts that also crossed the limit just clear the code.

        Returns:
            bool: True if this call created the lock
        """
        # Lock before deleting so racing guesses that land after the delete see it
        created = self.store.add(lock_key(email), LOCK_SENTINEL, self.config.OTP_ACCOUNT_LOCK_SECONDS)
        self.store.delete(otp_key(email), attempts_key(email))
        if created:
            logger.warning(
                f"Account locked for {email} after {failed_attempts} failed OTP attempts",
                extra={"event": "otp_account_locked", "email": email}
            )
        return created

    def verify(self, email: str, otp: str) -> None:
        """
        Check a presented code against the active one.

        A correct code consumes the active code. The third wrong code in a row
        locks the account and discards the active code. The lock is created by
        exactly one attempt even when wrong guesses race each other.

        Raises:
            AccountLockedError: The account is locked, or this attempt locked it
            ExpiredOrInvalidOtpError: No active code exists
            IncorrectOtpError: Wrong code, with the attempts left before lockout
        """
        if self.store.get(lock_key(email)):
            raise AccountLockedError()

        stored_otp = self.store.get(otp_key(email))
        if not stored_otp:
            raise ExpiredOrInvalidOtpError()

        if stored_otp != otp:
            failed_attempts = self.store.incr(attempts_key(email), self.config.OTP_ATTEMPTS_WINDOW_SECONDS)
            if failed_attempts >= self.config.OTP_MAX_FAILED_ATTEMPTS:
                self._lock_account(email, failed_attempts)
                raise AccountLockedError()

            # Counted after a concurrent lockout cleared the code
            if self.store.get(lock_key(email)):
                self.store.delete(attempts_key(email))
                raise AccountLockedError()

            remaining = self.config.OTP_MAX_FAILED_ATTEMPTS - failed_attempts
            noun = "attempt" if remaining == 1 else "attempts"
            logger.info(
                f"Incorrect OTP for {email} ({remaining} {noun} left)",
                extra={"event": "otp_incorrect", "email": email}
            )
            raise IncorrectOtpError(remaining)

        self.store.delete(otp_key(email), attempts_key(email))
        logger.info(f"OTP verified for {email}", extra={"event": "otp_verified", "email": email})
