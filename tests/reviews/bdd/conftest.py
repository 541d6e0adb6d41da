"""Shared BDD fixtures and step definitions for the Reviews domain."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then
from reviews.config import ReviewSettings
from reviews.rating.product_rating import ProductRating
from reviews.review.service import Caller, ReviewService


@pytest.fixture()
def service():
    return ReviewService(settings=ReviewSettings())


@pytest.fixture()
def submitted():
    """Reviews submitted in the scenario, keyed by customer id."""
    return {}


@pytest.fixture()
def error():
    """Container for the exception a step captured."""
    return {"exc": None}


@pytest.fixture()
def order_for():
    """Each customer reviews a product from its own delivered order."""

    def _order_for(customer_id, product_id):
        return f"order-{customer_id}-{product_id}"

    return _order_for


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{product_id}" with no reviews'))
def product_without_reviews(service, product_id):
    assert service.updater.current(product_id).review_count == 0


@given(parsers.cfparse('customer "{customer_id}" reviewed "{product_id}" with rating {rating:d}'))
def customer_reviewed(service, submitted, order_for, customer_id, product_id, rating):
    submitted[customer_id] = service.submit_review(
        Caller(user_id=customer_id),
        product_id=product_id,
        order_id=order_for(customer_id, product_id),
        rating=rating,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.re(r'the product "(?P<product_id>[^"]+)" has average (?P<average>[\d.]+) from (?P<count>\d+) reviews?'))
def product_has_figures(product_id, average, count):
    rating = current_domain.repository_for(ProductRating).get(product_id)
    assert rating.average_rating == float(average)
    assert rating.review_count == int(count)
