"""Repository for the AddressBook aggregate — one book per user."""

from protean.utils.globals import current_domain

from identity.address.book import Address, AddressBook
from identity.domain import identity


@identity.repository(part_of=AddressBook)
class AddressBookRepository:
    def for_user(self, user_id) -> AddressBook | None:
        books = self._dao.query.filter(user_id=str(user_id)).all().items
        return books[0] if books else None

    def get_or_create(self, user_id) -> AddressBook:
        book = self.for_user(user_id)
        if book is None:
            book = AddressBook.create(user_id=str(user_id))
            self.add(book)
        return book

    def owner_of(self, address_id) -> str | None:
        """User id of the book holding a live ``address_id``, or None.

        Looks the address row up directly and follows its link to the owning
        book, so the answer does not depend on how many books exist.
        """
        addresses = (
            current_domain.repository_for(Address)
            ._dao.query.filter(id=str(address_id), is_deleted=False)
            .all()
            .items
        )
        if not addresses:
            return None

        books = self._dao.query.filter(id=str(addresses[0].address_book_id)).all().items
        return str(books[0].user_id) if books else None
