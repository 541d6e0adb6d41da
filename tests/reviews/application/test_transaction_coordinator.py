"""Tests for TransactionCoordinator and the commit-or-nothing review commands."""

import pytest
from protean import current_domain
from protean.core.unit_of_work import UnitOfWork
from protean.exceptions import ExpectedVersionError
from reviews.config import ReviewSettings
from reviews.errors import StoreUnavailable, TransactionConflict
from reviews.rating.product_rating import ProductRating
from reviews.rating.updater import ProductRatingUpdater
from reviews.review.review import Review
from reviews.review.service import Caller, ReviewService
from reviews.review.transaction import TransactionCoordinator
from reviews.reviewer.stats import ReviewerStats
from sqlalchemy.exc import IntegrityError


class _Flaky:
    """Raises ``error`` on the first ``failures`` calls, then returns ``result``."""

    def __init__(self, error, failures, result="done"):
        self.error = error
        self.failures = failures
        self.result = result
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.result


@pytest.fixture()
def delays():
    return []


@pytest.fixture()
def coordinator(delays):
    return TransactionCoordinator(max_attempts=3, base_delay=0.1, sleep=delays.append)


class TestRetries:
    def test_conflict_is_retried(self, coordinator):
        fn = _Flaky(ExpectedVersionError("stale version"), failures=2)
        assert coordinator.run(fn) == "done"
        assert fn.calls == 3

    def test_key_collision_is_retried(self, coordinator):
        fn = _Flaky(IntegrityError("INSERT", {}, Exception("duplicate key")), failures=1)
        assert coordinator.run(fn) == "done"
        assert fn.calls == 2

    def test_gives_up_after_max_attempts(self, delays):
        fn = _Flaky(ExpectedVersionError("stale version"), failures=5)
        coordinator = TransactionCoordinator(max_attempts=2, sleep=delays.append)
        with pytest.raises(TransactionConflict) as exc:
            coordinator.run(fn, product_id="prod-001")
        assert fn.calls == 2
        assert exc.value.context == {"product_id": "prod-001"}
        assert isinstance(exc.value.__cause__, ExpectedVersionError)

    def test_other_errors_are_not_retried(self, coordinator, delays):
        fn = _Flaky(ValueError("bad input"), failures=1)
        with pytest.raises(ValueError):
            coordinator.run(fn)
        assert fn.calls == 1
        assert delays == []

    def test_stale_rating_write_is_retried(self, coordinator):
        ProductRatingUpdater().ensure("prod-stale")
        repo = current_domain.repository_for(ProductRating)
        stale = repo.get("prod-stale")
        with UnitOfWork():
            fresh = repo.get("prod-stale")
            fresh.recalculate([4])
            repo.add(fresh)

        attempts = []

        def dispatch():
            attempts.append(len(attempts) + 1)
            with UnitOfWork():
                rating = stale if len(attempts) == 1 else repo.get("prod-stale")
                rating.recalculate([4, 2])
                repo.add(rating)
            return rating

        rating = coordinator.run(dispatch)

        assert attempts == [1, 2]
        assert (rating.average_rating, rating.review_count) == (3.0, 2)
        assert repo.get("prod-stale").review_count == 2

    @pytest.mark.parametrize("error", [ConnectionError("refused"), TimeoutError("slow")])
    def test_store_errors_become_unavailable(self, coordinator, error):
        fn = _Flaky(error, failures=1)
        with pytest.raises(StoreUnavailable) as exc:
            coordinator.run(fn)
        assert exc.value.__cause__ is error
        assert fn.calls == 1


class TestBackoff:
    def test_waits_between_attempts_only(self, coordinator, delays):
        fn = _Flaky(ExpectedVersionError("stale version"), failures=5)
        with pytest.raises(TransactionConflict):
            coordinator.run(fn)
        assert len(delays) == 2

    def test_delay_doubles_with_jitter(self, coordinator, delays):
        fn = _Flaky(ExpectedVersionError("stale version"), failures=2)
        coordinator.run(fn)

        first, second = delays
        assert 0.05 <= first <= 0.1
        assert 0.1 <= second <= 0.2

    def test_no_delay_after_success(self, coordinator, delays):
        coordinator.run(_Flaky(None, failures=0))
        assert delays == []


class TestAtomicity:
    def test_failure_after_review_write_leaves_nothing(self, monkeypatch):
        def broken_refresh(self, product_id):
            raise RuntimeError("rating store down")

        monkeypatch.setattr(ProductRatingUpdater, "refresh", broken_refresh)
        service = ReviewService(settings=ReviewSettings())

        with pytest.raises(RuntimeError):
            service.submit_review(Caller(user_id="cust-atom"), product_id="prod-atom", order_id="order-atom", rating=5)

        assert current_domain.repository_for(Review).find_existing("cust-atom", "prod-atom", "order-atom") is None
        assert service.updater.current("prod-atom").review_count == 0

    def test_stats_failure_does_not_fail_submission(self, monkeypatch):
        def broken(self, reviewed_at=None):
            raise RuntimeError("stats unavailable")

        monkeypatch.setattr(ReviewerStats, "record_review", broken)
        service = ReviewService(settings=ReviewSettings())

        review = service.submit_review(Caller(user_id="cust-stats"), product_id="prod-stats", order_id="o-1", rating=3)

        assert service.get_review(review.id).rating.score == 3
        assert current_domain.repository_for(ProductRating).get("prod-stats").review_count == 1


class TestFirstRatingRecord:
    def test_ensure_creates_blank_record(self):
        ProductRatingUpdater().ensure("prod-new")
        rating = current_domain.repository_for(ProductRating).get("prod-new")
        assert (rating.average_rating, rating.review_count) == (0.0, 0)

    def test_ensure_keeps_existing_figures(self):
        service = ReviewService(settings=ReviewSettings())
        service.submit_review(Caller(user_id="cust-keep"), product_id="prod-keep", order_id="o-1", rating=2)

        service.updater.ensure("prod-keep")

        rating = current_domain.repository_for(ProductRating).get("prod-keep")
        assert (rating.average_rating, rating.review_count) == (2.0, 1)
