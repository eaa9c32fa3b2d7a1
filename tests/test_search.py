import pytest

from conftest import make_book
from mavlib.domain.entities import CatalogState, ResultType, Role, User
from mavlib.infrastructure.catalog.bundled import demo_users
from mavlib.infrastructure.memory.repository import CatalogRepository, UserRepository
from mavlib.services.search import SearchEngine


@pytest.fixture
def dune_engine():
    return SearchEngine(CatalogRepository([make_book()]), UserRepository(demo_users()))


def summary(results):
    return [(r.title, r.priority) for r in results]


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------
def test_exact_title_ranks_book_first(dune_engine):
    results = dune_engine.search("dune", Role.READER)

    assert summary(results.books) == [("Dune", 0)]
    assert results.all[0].type is ResultType.BOOK
    assert results.all[0].route == "/book/b1"
    assert results.all[0].subtitle == "by Frank Herbert"


def test_author_word_query(dune_engine):
    results = dune_engine.search("frank", Role.READER)

    assert summary(results.books) == [("Dune", 1)]
    assert summary(results.authors) == [("Frank Herbert", 0)]
    assert results.authors[0].route == "/categories?author=Frank%20Herbert"


def test_partial_author_match_uses_base_priority(dune_engine):
    results = dune_engine.search("herb", Role.READER)

    assert summary(results.authors) == [("Frank Herbert", 2)]


def test_category_exact_match_outranks_books(dune_engine):
    results = dune_engine.search("Science Fiction", Role.READER)

    assert summary(results.categories) == [("Science Fiction", 0)]
    assert summary(results.books) == [("Dune", 1)]
    assert [r.type for r in results.all] == [ResultType.CATEGORY, ResultType.BOOK]


def test_ties_break_on_type_then_title():
    catalog = CatalogRepository([
        make_book("b1", "Zebra Stories", author="Ann Lee"),
        make_book("b2", "apple stories", author="Bo Lee"),
    ])
    engine = SearchEngine(catalog, UserRepository(demo_users()))

    results = engine.search("stories", Role.READER)
    assert [r.title for r in results.books] == ["apple stories", "Zebra Stories"]

    results = engine.search("lee", Role.READER)
    # authors ("lee" is a whole word) at 0, then books at 1
    assert [(r.type, r.title) for r in results.all] == [
        (ResultType.AUTHOR, "Ann Lee"),
        (ResultType.AUTHOR, "Bo Lee"),
        (ResultType.BOOK, "apple stories"),
        (ResultType.BOOK, "Zebra Stories"),
    ]


def test_same_priority_orders_by_type_name():
    users = UserRepository(demo_users())
    users.create(User(id="user-9", name="Herbert Fan", email="fan@mavlibrary.org", role=Role.READER))
    engine = SearchEngine(CatalogRepository([make_book()]), users)

    results = engine.search("herb", Role.ADMIN)

    # author and user both sit at priority 2; "author" sorts before "user"
    assert [(r.type, r.priority) for r in results.all] == [
        (ResultType.BOOK, 1),
        (ResultType.AUTHOR, 2),
        (ResultType.USER, 2),
    ]


def test_isbn_match_is_case_sensitive():
    engine = SearchEngine(
        CatalogRepository([make_book(isbn="ISBN-X42")]), UserRepository(demo_users())
    )

    assert summary(engine.search("X42", Role.READER).books) == [("Dune", 1)]
    assert engine.search("x42", Role.READER).is_empty()


# ---------------------------------------------------------------------------
# Empty and unmatched queries
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("query", ["", "   ", None])
def test_empty_query_returns_empty_groups(dune_engine, query):
    results = dune_engine.search(query, Role.ADMIN)

    assert results.is_empty()
    assert results.all == []


def test_unmatched_query_returns_empty_groups(dune_engine):
    results = dune_engine.search("qwertyuiop", Role.ADMIN)

    assert results.is_empty()
    assert results.all == []


def test_query_is_trimmed(dune_engine):
    assert summary(dune_engine.search("  dune ", Role.READER).books) == [("Dune", 0)]


# ---------------------------------------------------------------------------
# Role gating
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("role", [Role.READER, Role.STAFF, None])
def test_non_admin_never_sees_users_or_admin_panel(dune_engine, role):
    results = dune_engine.search("admin", role)

    assert results.users == []
    assert all(r.title != "Admin Panel" for r in results.all)
    assert results.is_empty()


def test_admin_sees_users_and_admin_panel(dune_engine):
    results = dune_engine.search("admin", Role.ADMIN)

    assert summary(results.users) == [("Alex Admin", 2)]
    assert results.users[0].route == "/admin?tab=users"
    assert summary(results.pages) == [("Admin Panel", 4)]
    assert [r.type for r in results.all] == [ResultType.USER, ResultType.PAGE]


def test_exact_user_email_is_priority_zero(dune_engine):
    results = dune_engine.search("Reader@MavLibrary.org", Role.ADMIN)

    assert summary(results.users) == [("Riley Reader", 0)]


def test_role_change_applies_on_next_query(dune_engine):
    assert dune_engine.search("panel", Role.READER).pages == []
    assert summary(dune_engine.search("panel", Role.ADMIN).pages) == [("Admin Panel", 4)]
    assert dune_engine.search("panel", Role.READER).pages == []


def test_pages_and_features(dune_engine):
    results = dune_engine.search("books", Role.READER)

    assert summary(results.features) == [("Borrow Books", 5), ("Return Books", 5)]
    assert summary(dune_engine.search("dashboard", Role.READER).pages) == [("Dashboard", 0)]


# ---------------------------------------------------------------------------
# Quick list, de-duplication and loading state
# ---------------------------------------------------------------------------
def test_quick_list_is_capped_at_fifteen():
    books = [make_book(f"b{i:02d}", f"Saga {i:02d}", author=f"Writer {i:02d}") for i in range(20)]
    engine = SearchEngine(CatalogRepository(books), UserRepository(demo_users()))

    results = engine.search("saga", Role.READER)

    assert len(results.books) == 20
    assert len(results.all) == 15
    assert results.all == results.books[:15]


def test_duplicate_vocabulary_collapses(search_engine):
    # two Frank Herbert books in the bundled catalog, one author entry
    results = search_engine.search("frank herbert", Role.READER)

    assert summary(results.authors) == [("Frank Herbert", 0)]
    assert {r.title for r in results.books} == {"Dune", "Children of Dune"}
    assert len({r.id for r in results.all}) == len(results.all)


def test_loading_catalog_yields_no_catalog_matches():
    catalog = CatalogRepository()
    engine = SearchEngine(catalog, UserRepository(demo_users()))

    results = engine.search("dune", Role.READER)
    assert results.is_empty()

    catalog.replace_all([make_book()])
    catalog.set_state(CatalogState.READY)
    assert summary(engine.search("dune", Role.READER).books) == [("Dune", 0)]


def test_loading_catalog_still_matches_pages():
    engine = SearchEngine(CatalogRepository(), UserRepository(demo_users()))

    results = engine.search("home", Role.READER)
    assert summary(results.pages) == [("Home", 0)]
    assert results.books == []


def test_deleted_book_leaves_results(catalog_repo, search_engine):
    assert search_engine.search("Watchmen", Role.READER).books
    catalog_repo.delete(next(b.id for b in catalog_repo.list_all() if b.title == "Watchmen"))
    assert search_engine.search("Watchmen", Role.READER).books == []
