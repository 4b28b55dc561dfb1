"""Customer aggregate: a registered user account that can own orders."""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, String, ValueObject

from ordering.domain import ordering
from ordering.shared.contact import EmailAddress, PersonName, PhoneNumber


@ordering.event(part_of="Customer")
class CustomerRegistered:
    __version__ = 1

    customer_id = Identifier(required=True)
    email = String(required=True)
    full_name = String(required=True)
    registered_at = DateTime(required=True)


@ordering.aggregate
class Customer:
    email = ValueObject(EmailAddress, required=True)
    name = ValueObject(PersonName, required=True)
    phone = ValueObject(PhoneNumber)
    registered_at = DateTime()

    @classmethod
    def register(
        cls,
        email: EmailAddress,
        name: PersonName,
        phone: PhoneNumber | None = None,
    ):
        now = datetime.now(UTC)
        customer = cls(email=email, name=name, phone=phone, registered_at=now)
        customer.raise_(
            CustomerRegistered(
                customer_id=str(customer.id),
                email=email.address,
                full_name=name.full_name,
                registered_at=now,
            )
        )
        return customer


@ordering.repository(part_of=Customer)
class CustomerRepository:
    def find_by_email(self, email: str) -> Customer | None:
        results = self._dao.query.filter(email_address=email.strip().lower()).all()
        return results.items[0] if results.items else None
