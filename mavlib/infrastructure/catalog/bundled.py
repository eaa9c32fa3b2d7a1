"""Bundled default records used when the remote catalog is unavailable."""

from dataclasses import replace
from datetime import datetime, timezone

from mavlib.core.security import hash_password
from mavlib.domain.entities import Book, Role, User
from mavlib.domain.repositories import ICatalogSupplier

DEMO_PASSWORD = "password"


def _book(book_id, title, author, isbn, category, year, rating, copies, description):
    return Book(
        id=book_id,
        title=title,
        author=author,
        isbn=isbn,
        category=category,
        description=description,
        cover_image="",
        published_year=year,
        rating=rating,
        total_copies=copies,
        available_copies=copies,
    )


BUNDLED_BOOKS = (
    _book("1", "Dune", "Frank Herbert", "9780441172719", "Science Fiction", 1965, 4.6, 4,
          "A desert planet, a precious spice and a young heir caught in a war of houses."),
    _book("2", "The Hobbit", "J.R.R. Tolkien", "9780547928227", "Fantasy", 1937, 4.7, 5,
          "Bilbo Baggins is swept into a quest to reclaim a dwarven kingdom."),
    _book("3", "Pride and Prejudice", "Jane Austen", "9780141439518", "Romance", 1813, 4.5, 3,
          "Elizabeth Bennet and Mr. Darcy navigate manners, money and misjudgement."),
    _book("4", "A Brief History of Time", "Stephen Hawking", "9780553380163", "Science", 1988, 4.4, 2,
          "From the big bang to black holes, an accessible tour of cosmology."),
    _book("5", "The Da Vinci Code", "Dan Brown", "9780307474278", "Mystery", 2003, 3.9, 4,
          "A symbologist races through Paris and London to decode a secret."),
    _book("6", "Dracula", "Bram Stoker", "9780486411095", "Horror", 1897, 4.0, 2,
          "Letters and diaries chart the arrival of a count from Transylvania."),
    _book("7", "Leaves of Grass", "Walt Whitman", "9780486456768", "Poetry", 1855, 4.2, 1,
          "Whitman's lifelong collection celebrating the self and democracy."),
    _book("8", "Steve Jobs", "Walter Isaacson", "9781451648539", "Biography", 2011, 4.3, 3,
          "The authorized biography of the Apple co-founder."),
    _book("9", "Treasure Island", "Robert Louis Stevenson", "9780141321004", "Adventure", 1883, 4.1, 3,
          "Young Jim Hawkins sails in search of buried pirate gold."),
    _book("10", "Charlotte's Web", "E.B. White", "9780064400558", "Children", 1952, 4.6, 4,
          "A pig named Wilbur and the spider who saves his life."),
    _book("11", "Sapiens", "Yuval Noah Harari", "9780062316097", "History", 2011, 4.4, 3,
          "A brief history of humankind from the Stone Age to the present."),
    _book("12", "To Kill a Mockingbird", "Harper Lee", "9780061120084", "Fiction", 1960, 4.8, 5,
          "A childhood in Alabama shadowed by a trial that divides the town."),
    _book("13", "Watchmen", "Alan Moore", "9781401245252", "Comics", 1987, 4.5, 2,
          "Retired heroes investigate the murder of one of their own."),
    _book("14", "Children of Dune", "Frank Herbert", "9780593098233", "Science Fiction", 1976, 4.1, 2,
          "The twins of Paul Atreides inherit an empire and its prophecies."),
)


def bundled_books() -> list[Book]:
    """Fresh copies of the bundled records."""
    return [replace(book) for book in BUNDLED_BOOKS]


def demo_users() -> list[User]:
    """One demo actor per role; all share ``DEMO_PASSWORD``."""
    joined = datetime(2024, 1, 15, tzinfo=timezone.utc)
    return [
        User(id="user-1", name="Riley Reader", email="reader@mavlibrary.org", role=Role.READER,
             hashed_password=hash_password(DEMO_PASSWORD), membership_date=joined),
        User(id="user-2", name="Sam Staff", email="staff@mavlibrary.org", role=Role.STAFF,
             hashed_password=hash_password(DEMO_PASSWORD), membership_date=joined),
        User(id="user-3", name="Alex Admin", email="admin@mavlibrary.org", role=Role.ADMIN,
             hashed_password=hash_password(DEMO_PASSWORD), membership_date=joined),
    ]


class BundledCatalogSupplier(ICatalogSupplier):
    """Serves the bundled records; never fails."""

    async def fetch_books(self) -> list[Book]:
        return bundled_books()
