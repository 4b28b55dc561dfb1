"""Customer registration: command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from ordering.customer.customer import Customer
from ordering.domain import logger, ordering
from ordering.errors import UserAlreadyExists
from ordering.shared.contact import EmailAddress, PersonName, PhoneNumber


@ordering.command(part_of="Customer")
class RegisterCustomer:
    email = String(required=True, max_length=254)
    first_name = String(max_length=100)
    last_name = String(max_length=100)
    phone = String(max_length=20)


def register(email: str, first_name: str | None, last_name: str | None, phone: str | None = None) -> Customer:
    """Create and persist a customer inside the active unit of work.

    Raises ``UserAlreadyExists`` when the email address is taken.
    """
    if not (first_name or "").strip():
        raise ValidationError({"first_name": ["First name is required"]})
    if not (last_name or "").strip():
        raise ValidationError({"last_name": ["Last name is required"]})

    email_address = EmailAddress.of(email)
    repo = current_domain.repository_for(Customer)
    if repo.find_by_email(email_address.address) is not None:
        raise UserAlreadyExists(email_address.address)

    customer = Customer.register(
        email=email_address,
        name=PersonName.of(first_name, last_name),
        phone=PhoneNumber.of(phone) if phone else None,
    )
    repo.add(customer)

    logger.info("Customer registered", customer_id=str(customer.id))
    return customer


@ordering.command_handler(part_of=Customer)
class RegisterCustomerHandler:
    @handle(RegisterCustomer)
    def register_customer(self, command):
        customer = register(
            email=command.email,
            first_name=command.first_name,
            last_name=command.last_name,
            phone=command.phone,
        )
        return str(customer.id)
