import json
from datetime import UTC, datetime

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def reviews_bed():
    from reviews.domain import reviews

    bed = DomainFixture(reviews)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(scope="session", autouse=True)
def setup_db(reviews_bed):
    from reviews.domain import reviews
    from reviews.utils.db import drop_db, setup_db

    setup_db(reviews)

    yield

    drop_db(reviews)


@pytest.fixture(autouse=True)
def _ctx(reviews_bed):
    """Run each test inside the Reviews domain context and wipe its data after."""
    with reviews_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        for _, broker in current_domain.brokers.items():
            broker._data_reset()

        current_domain.event_store.store._data_reset()


@pytest.fixture()
def customer():
    from reviews.review.service import Caller

    return Caller(user_id="cust-001")


@pytest.fixture()
def other_customer():
    from reviews.review.service import Caller

    return Caller(user_id="cust-002")


@pytest.fixture()
def admin():
    from reviews.review.service import Caller

    return Caller(user_id="admin-001", is_admin=True)


@pytest.fixture()
def deliver():
    """Record delivered orders the way the OrderDelivered handler does."""
    from reviews.purchases.ordering_events import OrderingEventsHandler
    from shared.events.ordering import OrderDelivered

    def _deliver(customer_id, order_id, *product_ids):
        OrderingEventsHandler().on_order_delivered(
            OrderDelivered(
                order_id=order_id,
                customer_id=customer_id,
                items=json.dumps([{"product_id": product_id} for product_id in product_ids]),
                delivered_at=datetime.now(UTC),
            )
        )

    return _deliver
