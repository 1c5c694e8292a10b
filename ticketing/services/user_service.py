"""User service - registration and lookups."""

import logging
from collections.abc import Callable
from datetime import UTC, date, datetime

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email

from ticketing.domain import OrganizerProfile, User, UserKind
from ticketing.domain.errors import (
    EmailAlreadyRegisteredError,
    InvalidRegistrationError,
    UserNotFoundError,
)
from ticketing.domain.validators import (
    is_valid_bank_account,
    is_valid_cpf,
    normalize_phone,
)
from ticketing.stores.interfaces import UserStore

logger = logging.getLogger(__name__)

MIN_AGE = 18
MAX_AGE = 117


def _today() -> date:
    return datetime.now(UTC).date()


def _years_between(born: date, today: date) -> int:
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


class UserService:
    """Service for user accounts."""

    def __init__(self, users: UserStore, today: Callable[[], date] = _today) -> None:
        self._users = users
        self._today = today

    def register(
        self,
        name: str,
        email: str,
        cpf: str,
        birth_date: date | None,
        phone: str | None = None,
        city: str = "",
        address: str = "",
        organizer: OrganizerProfile | None = None,
    ) -> User:
        """Register a buyer, or an organizer when a profile is given.

        Raises:
            EmailAlreadyRegisteredError: If the email is taken.
            InvalidRegistrationError: If any field is invalid.
        """
        email = (email or "").strip()
        if not name or not name.strip():
            raise InvalidRegistrationError("Name is required")
        try:
            validate_email(email)
        except DjangoValidationError as exc:
            raise InvalidRegistrationError("Invalid email") from exc
        if self._users.find_by_email(email) is not None:
            raise EmailAlreadyRegisteredError(email)
        if not is_valid_cpf(cpf):
            raise InvalidRegistrationError("Invalid CPF")
        try:
            phone = normalize_phone(phone)
        except ValueError as exc:
            raise InvalidRegistrationError(str(exc)) from exc
        self._check_age(birth_date)

        kind = UserKind.STANDARD
        if organizer is not None:
            if not is_valid_bank_account(organizer.bank_account):
                raise InvalidRegistrationError(
                    "Invalid bank account; use digits and hyphens only"
                )
            kind = UserKind.ORGANIZER

        user = self._users.save(
            User(
                id=None,
                name=name.strip(),
                email=email,
                kind=kind,
                organizer=organizer,
                cpf=cpf,
                phone=phone,
                birth_date=birth_date,
                city=city,
                address=address,
            )
        )
        logger.info("Registered %s user %s", kind.value.lower(), user.id)
        return user

    def get_user(self, user_id: int) -> User:
        """Return a user by ID.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        user = self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def find_by_email(self, email: str) -> User | None:
        return self._users.find_by_email(email)

    def _check_age(self, birth_date: date | None) -> None:
        if birth_date is None:
            raise InvalidRegistrationError("Birth date is required")
        age = _years_between(birth_date, self._today())
        if age < MIN_AGE:
            raise InvalidRegistrationError(f"You must be at least {MIN_AGE} years old")
        if age > MAX_AGE:
            raise InvalidRegistrationError("Birth date is not plausible")
