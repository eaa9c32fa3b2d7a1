import pytest

from conftest import ADMIN_ID, READER_ID, STAFF_ID


def test_dashboard_counts(report_service, ledger, clock):
    ledger.borrow(READER_ID, "1")
    clock.advance(days=10)
    ledger.borrow(READER_ID, "2")
    ledger.borrow(READER_ID, "3")
    ledger.return_loan(ledger.get_active_loan(READER_ID, "3").id)
    clock.advance(days=5)
    ledger.recompute_overdue()

    stats = report_service.dashboard(READER_ID)

    assert stats.borrowed == 2
    assert stats.overdue == 1
    # the second loan is due in 9 days, the first is already past due
    assert stats.due_this_week == 0
    assert stats.read == 1

    clock.advance(days=3)
    assert report_service.dashboard(READER_ID).due_this_week == 1


def test_recommendations_skip_held_and_unavailable_books(report_service, ledger):
    # To Kill a Mockingbird (4.8) is the top-rated record
    ledger.borrow(READER_ID, "12")
    ledger.borrow(STAFF_ID, "7")  # the only copy of Leaves of Grass

    recommended = report_service.dashboard(READER_ID).recommended

    assert len(recommended) == 4
    assert [b.title for b in recommended] == [
        "The Hobbit", "Charlotte's Web", "Dune", "Pride and Prejudice",
    ]
    assert all(b.is_available for b in recommended)


def test_admin_summary(report_service, ledger, clock):
    ledger.borrow(READER_ID, "1")
    ledger.borrow(ADMIN_ID, "2")
    clock.advance(days=15)
    ledger.recompute_overdue()

    stats = report_service.admin_summary()

    assert stats.total_books == 14
    assert stats.total_users == 3
    assert stats.total_borrowed == 2
    assert stats.total_overdue == 2


def test_category_stats(report_service, ledger):
    ledger.borrow(READER_ID, "7")

    stats = {s.name: s for s in report_service.category_stats()}

    assert list(stats) == sorted(stats)
    scifi = stats["Science Fiction"]
    assert scifi.total_books == 2
    assert scifi.available == 2
    assert scifi.avg_rating == pytest.approx(4.35)
    assert scifi.most_popular_book == "Dune"
    assert stats["Poetry"].available == 0
