"""Postal address value object."""

from protean.fields import String

from ordering.domain import ordering


@ordering.value_object
class Address:
    """A billing or delivery address captured at checkout time.

    Once recorded on an Order the address never changes, regardless of later
    edits to the customer's address book.
    """

    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
