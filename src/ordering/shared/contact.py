"""Contact value objects: email address, person name and phone number."""

import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from ordering.domain import ordering

_FORBIDDEN_EMAIL_CHARACTERS = (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\")


@ordering.value_object
class EmailAddress:
    """A structurally valid email address, stored lower-cased."""

    address = String(required=True, max_length=254)

    @invariant.post
    def verify_email_address(self):
        email = self.address

        if any(ch.isspace() for ch in email) or email.count("@") != 1:
            raise ValidationError({"email": [f"Invalid email address: {email}"]})

        local_part, domain_part = email.split("@", 1)

        if not local_part or local_part.startswith(".") or local_part.endswith("."):
            raise ValidationError({"email": [f"Invalid email address: {email}"]})

        if not domain_part or "." not in domain_part or domain_part.startswith(".") or domain_part.endswith("."):
            raise ValidationError({"email": [f"Invalid email address: {email}"]})

        if ".." in email or any(ch in email for ch in _FORBIDDEN_EMAIL_CHARACTERS):
            raise ValidationError({"email": [f"Invalid email address: {email}"]})

    @classmethod
    def of(cls, address: str) -> "EmailAddress":
        return cls(address=(address or "").strip().lower())

    def __str__(self) -> str:
        return self.address


@ordering.value_object
class PersonName:
    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)

    @invariant.post
    def names_must_not_be_blank(self):
        if not self.first_name.strip():
            raise ValidationError({"first_name": ["First name cannot be blank"]})
        if not self.last_name.strip():
            raise ValidationError({"last_name": ["Last name cannot be blank"]})

    @classmethod
    def of(cls, first_name: str, last_name: str) -> "PersonName":
        return cls(first_name=(first_name or "").strip(), last_name=(last_name or "").strip())

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __str__(self) -> str:
        return self.full_name


@ordering.value_object
class PhoneNumber:
    """Digits, spaces, hyphens, parentheses and an optional leading +."""

    number = String(required=True, max_length=20)

    @invariant.post
    def validate_phone_format(self):
        number = self.number

        if not re.search(r"\d", number) or not re.match(r"^\+?[\d\s\-()]+$", number):
            raise ValidationError({"phone": [f"Invalid phone number: {number}"]})

    @classmethod
    def of(cls, number: str) -> "PhoneNumber":
        return cls(number=(number or "").strip())

    def __str__(self) -> str:
        return self.number
