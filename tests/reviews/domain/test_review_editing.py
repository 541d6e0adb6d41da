"""Tests for editing review content."""

import pytest
from protean.exceptions import ValidationError
from reviews.errors import InvalidRating
from reviews.review.events import ReviewEdited
from reviews.review.review import Review


@pytest.fixture()
def review():
    review = Review.submit(
        product_id="prod-001",
        customer_id="cust-001",
        order_id="order-001",
        rating=4,
        title="Original",
        comment="Original comment",
    )
    review._events.clear()
    return review


class TestEdit:
    def test_only_supplied_fields_change(self, review):
        review.edit(edited_by="cust-001", title="Updated")
        assert review.title == "Updated"
        assert review.comment == "Original comment"
        assert review.rating.score == 4

    def test_rating_change_is_reported(self, review):
        assert review.edit(edited_by="cust-001", rating=2) is True
        assert review.rating.score == 2

    def test_same_rating_is_not_a_change(self, review):
        assert review.edit(edited_by="cust-001", rating=4) is False

    def test_text_change_is_not_a_rating_change(self, review):
        assert review.edit(edited_by="cust-001", comment="New words") is False

    def test_images_replaced(self, review):
        review.edit(edited_by="cust-001", images=["https://x.io/new.webp"])
        assert review.image_urls == ["https://x.io/new.webp"]

    def test_updated_at_moves(self, review):
        before = review.updated_at
        review.edit(edited_by="cust-001", title="Later")
        assert review.updated_at >= before

    def test_raises_edited_event(self, review):
        review.edit(edited_by="admin-001", rating=5)
        event = review._events[-1]
        assert isinstance(event, ReviewEdited)
        assert event.rating == 5
        assert event.edited_by == "admin-001"

    def test_invalid_rating_leaves_review_untouched(self, review):
        with pytest.raises(InvalidRating):
            review.edit(edited_by="cust-001", title="Ignored", rating=7)
        assert review.title == "Original"
        assert review.rating.score == 4

    def test_too_many_images_rejected(self, review):
        with pytest.raises(ValidationError):
            review.edit(edited_by="cust-001", images=[f"https://x.io/{i}.png" for i in range(6)])

    def test_overlong_comment_rejected(self, review):
        with pytest.raises(ValidationError):
            review.edit(edited_by="cust-001", comment="y" * 501)
