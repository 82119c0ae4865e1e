"""
CREDENTIAL VERIFICATION & LOGIN HANDLER

Staff and customer-portal logins go through an injected
CredentialVerifier. The mock directories below are the only
verifiers shipped; anything implementing ``verify`` can replace them.

Rules:
- Passwords never leave this module
- Exact, case-sensitive email/password match
- Failures are AuthFailure, never a partial user
"""

import hmac
import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from tms.security.roles import ACCOUNTS, ADMIN, CUSTOMER, OPERATIONS, TRANSPORT

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
INTERNAL_ERROR = "Internal server error"


class AuthFailure(Exception):
    """Raised when an email/password pair does not match any account."""

    def __init__(self, message: str = INVALID_CREDENTIALS):
        super().__init__(message)


class CredentialVerifier(Protocol):
    def verify(self, email: str, password: str) -> Dict[str, Any]:
        """Return the public user object, or raise AuthFailure."""
        ...


# ==================================================
# MOCK ACCOUNT DIRECTORIES
# ==================================================
STAFF_ACCOUNTS: List[Dict[str, Any]] = [
    {"id": "1", "email": "admin@tms.com", "password": "admin123", "role": ADMIN, "name": "Admin User"},
    {"id": "2", "email": "ops@tms.com", "password": "ops123", "role": OPERATIONS, "name": "Operations Manager"},
    {"id": "3", "email": "acc@tms.com", "password": "acc123", "role": ACCOUNTS, "name": "Accounts Executive"},
    {"id": "4", "email": "trans@tms.com", "password": "trans123", "role": TRANSPORT, "name": "Transport Coordinator"},
]

# Consigners; "name" matches the consigner on their LRs and invoices
CUSTOMER_ACCOUNTS: List[Dict[str, Any]] = [
    {"id": "c1", "email": "abc.traders@email.com", "password": "abc123",
     "role": CUSTOMER, "name": "ABC Traders", "company": "ABC Trading Co"},
    {"id": "c2", "email": "tech.sol@email.com", "password": "tech123",
     "role": CUSTOMER, "name": "Tech Solutions", "company": "Tech Solutions Ltd"},
    {"id": "c3", "email": "retail.hub@email.com", "password": "retail123",
     "role": CUSTOMER, "name": "Retail Hub", "company": "Retail Hub Inc"},
]


class StaticCredentialVerifier:
    """Verifier over a fixed in-memory account list."""

    def __init__(self, accounts: Iterable[Dict[str, Any]]):
        self._accounts = [dict(a) for a in accounts]

    def verify(self, email: str, password: str) -> Dict[str, Any]:
        if not isinstance(email, str) or not isinstance(password, str):
            raise AuthFailure()

        for account in self._accounts:
            if account["email"] == email and hmac.compare_digest(
                account["password"].encode("utf-8"), password.encode("utf-8")
            ):
                return {k: v for k, v in account.items() if k != "password"}

        raise AuthFailure()


def staff_verifier() -> StaticCredentialVerifier:
    return StaticCredentialVerifier(STAFF_ACCOUNTS)


def customer_verifier() -> StaticCredentialVerifier:
    return StaticCredentialVerifier(CUSTOMER_ACCOUNTS)


def authenticate(verifier: CredentialVerifier, email: str, password: str) -> Dict[str, Any]:
    """
    Verify credentials and return the public user object.

    Raises AuthFailure on mismatch.
    """
    try:
        user = verifier.verify(email, password)
    except AuthFailure:
        logger.warning(f"Failed login for {email!r}")
        raise

    logger.info(f"Login: {user.get('email')} as {user.get('role')}")
    return user


def handle_login(
    payload: Any,
    verifier: Optional[CredentialVerifier] = None,
) -> Tuple[int, Dict[str, Any]]:
    """
    Login endpoint contract.

    Returns (status_code, body):
    - 200, {"user": {...}} on an exact match
    - 401, {"error": "Invalid email or password"} on mismatch
    - 500, {"error": "Internal server error"} on anything unexpected
      (including a payload that is not a JSON object)
    """
    verifier = verifier or staff_verifier()

    try:
        email = payload.get("email")
        password = payload.get("password")
        user = authenticate(verifier, email, password)
    except AuthFailure:
        return 401, {"error": INVALID_CREDENTIALS}
    except Exception:
        logger.exception("Login handler failed")
        return 500, {"error": INTERNAL_ERROR}

    return 200, {"user": user}
