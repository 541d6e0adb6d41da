"""Tests for the ReviewRepository queries."""

import types
from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from reviews.review import repository as repository_module
from reviews.review.repository import ReviewPage
from reviews.review.review import Review


@pytest.fixture()
def repo():
    return current_domain.repository_for(Review)


def _store(repo, customer_id, product_id="prod-001", rating=4, status="Visible", age_minutes=0):
    review = Review.submit(
        product_id=product_id,
        customer_id=customer_id,
        order_id=f"order-{customer_id}",
        rating=rating,
        status=status if status != "Hidden" else "Visible",
    )
    if status == "Hidden":
        review.change_status("Hidden", changed_by="admin-001")
    review.created_at = datetime(2024, 1, 1, tzinfo=UTC) - timedelta(minutes=age_minutes)
    repo.add(review)
    return review


class TestFindExisting:
    def test_found(self, repo):
        review = _store(repo, "cust-001")
        assert repo.find_existing("cust-001", "prod-001", "order-cust-001").id == review.id

    def test_not_found(self, repo):
        assert repo.find_existing("cust-001", "prod-001", "order-x") is None


class TestFindByProduct:
    def test_is_lazy(self, repo):
        assert isinstance(repo.find_by_product("prod-001"), types.GeneratorType)

    def test_newest_first(self, repo):
        _store(repo, "cust-old", age_minutes=30)
        _store(repo, "cust-new", age_minutes=1)
        _store(repo, "cust-mid", age_minutes=10)

        customers = [str(r.customer_id) for r in repo.find_by_product("prod-001")]
        assert customers == ["cust-new", "cust-mid", "cust-old"]

    def test_status_filter(self, repo):
        _store(repo, "cust-a")
        _store(repo, "cust-b", status="Hidden")
        _store(repo, "cust-c", status="Pending")

        visible = [str(r.customer_id) for r in repo.find_by_product("prod-001", status="Visible")]
        assert visible == ["cust-a"]

    def test_scans_past_one_batch(self, repo, monkeypatch):
        monkeypatch.setattr(repository_module, "SCAN_PAGE_SIZE", 2)
        for index in range(5):
            _store(repo, f"cust-{index}", age_minutes=index)

        assert len(list(repo.find_by_product("prod-001"))) == 5

    def test_other_products_excluded(self, repo):
        _store(repo, "cust-a", product_id="prod-a")
        assert list(repo.find_by_product("prod-b")) == []


class TestFindByUser:
    def test_all_statuses(self, repo):
        _store(repo, "cust-a", product_id="prod-1")
        _store(repo, "cust-a", product_id="prod-2", status="Hidden")
        assert len(list(repo.find_by_user("cust-a"))) == 2
        assert len(list(repo.find_by_user("cust-a", status="Hidden"))) == 1


class TestPaging:
    def test_page_by_product(self, repo):
        for index in range(3):
            _store(repo, f"cust-{index}", age_minutes=index)

        page = repo.page_by_product("prod-001", page=2, limit=2)
        assert [str(r.customer_id) for r in page.items] == ["cust-2"]
        assert page.total == 3
        assert page.total_pages == 2

    def test_page_by_status_without_filter(self, repo):
        _store(repo, "cust-a")
        _store(repo, "cust-b", status="Pending")
        assert repo.page_by_status().total == 2
        assert repo.page_by_status("Pending").total == 1

    def test_empty_page(self):
        assert ReviewPage().total_pages == 0

    def test_remove(self, repo):
        review = _store(repo, "cust-a")
        repo.remove(review)
        assert repo.find_existing("cust-a", "prod-001", "order-cust-a") is None
