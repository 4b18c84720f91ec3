"""Shared BDD fixtures and step definitions for the Identity domain."""

import pytest
from identity.address.book import AddressBook
from identity.address.events import AddressAdded, AddressFlagChanged, AddressRemoved, AddressUpdated
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

# Map event name strings to classes for dynamic lookup
_EVENT_CLASSES = {
    "AddressAdded": AddressAdded,
    "AddressUpdated": AddressUpdated,
    "AddressRemoved": AddressRemoved,
    "AddressFlagChanged": AddressFlagChanged,
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def address_fields():
    """Complete, valid address fields for a given contact name."""

    def _build(name):
        return {
            "name": name,
            "phone": "9876543210",
            "line": f"{name} Street",
            "city": "Bengaluru",
            "state": "Karnataka",
            "pincode": "560001",
        }

    return _build


@pytest.fixture()
def named():
    def _find(book, name):
        return next(a for a in book.addresses if a.name == name)

    return _find


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an empty address book", target_fixture="book")
def empty_book():
    book = AddressBook.create(user_id="user-001")
    book._events.clear()
    return book


@given(parsers.cfparse('the book holds an address "{name}"'), target_fixture="book")
def book_holds(book, address_fields, name):
    book.add_address(**address_fields(name))
    book._events.clear()
    return book


@given(parsers.cfparse('the book holds a default address "{name}"'), target_fixture="book")
def book_holds_default(book, address_fields, name):
    book.add_address(is_default=True, **address_fields(name))
    book._events.clear()
    return book


@given(parsers.cfparse('the book holds a primary address "{name}"'), target_fixture="book")
def book_holds_primary(book, address_fields, name):
    book.add_address(is_primary=True, **address_fields(name))
    book._events.clear()
    return book


@given(parsers.cfparse("the book holds {count:d} addresses"), target_fixture="book")
def book_holds_many(book, address_fields, count):
    for n in range(count):
        book.add_address(**address_fields(f"Address {n}"))
    book._events.clear()
    return book


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the default address is "{name}"'))
def default_address_is(book, name):
    assert [a.name for a in book.live_addresses() if a.is_default] == [name]


@then(parsers.cfparse('the primary address is "{name}"'))
def primary_address_is(book, name):
    assert [a.name for a in book.live_addresses() if a.is_primary] == [name]


@then("the book has no default address")
def no_default_address(book):
    assert not any(a.is_default for a in book.addresses)


@then("the book has no primary address")
def no_primary_address(book):
    assert not any(a.is_primary for a in book.addresses)


@then(parsers.cfparse("the book has {count:d} live addresses"))
def live_address_count(book, count):
    assert len(book.live_addresses()) == count


@then("the action fails with a validation error")
def action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("an {event_type} event is raised"))
def event_raised(book, event_type):
    event_cls = _EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in book._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in book._events]}"
