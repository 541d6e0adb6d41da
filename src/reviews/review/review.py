"""Review aggregate, the core of the Reviews & Ratings domain.

A review belongs to one customer, one product and the delivered order that
entitles the customer to write it. Only Visible reviews count toward the
product's rating.

State Machine (3 states):
    PENDING → VISIBLE | HIDDEN
    VISIBLE ⇄ HIDDEN
    any → (deleted)
"""

import json
import re
import uuid
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from reviews.domain import reviews
from reviews.errors import InvalidRating, InvalidStatus
from reviews.review.events import (
    ReviewEdited,
    ReviewSubmitted,
    ReviewVisibilityChanged,
    ReviewVoteRecorded,
)

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()

MAX_IMAGES = 5
TITLE_MAX_LENGTH = 100
COMMENT_MAX_LENGTH = 500

_IMAGE_URL = re.compile(r"^(https?://).+\.(jpg|jpeg|png|webp|gif)$", re.IGNORECASE)

# Namespace for review identities derived from (customer, product, order)
_REVIEW_NAMESPACE = uuid.UUID("8d1f6f0e-3c1b-5b7a-9a43-6a1f0e2c7d54")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ReviewStatus(Enum):
    PENDING = "Pending"
    VISIBLE = "Visible"
    HIDDEN = "Hidden"


class VoteType(Enum):
    LIKE = "Like"
    DISLIKE = "Dislike"


# ---------------------------------------------------------------------------
# State Machine
# ---------------------------------------------------------------------------
_VALID_TRANSITIONS = {
    ReviewStatus.PENDING: {ReviewStatus.VISIBLE, ReviewStatus.HIDDEN},
    ReviewStatus.VISIBLE: {ReviewStatus.HIDDEN},
    ReviewStatus.HIDDEN: {ReviewStatus.VISIBLE},
}


def review_identity(customer_id, product_id, order_id) -> str:
    """Identity of the single review allowed per customer, product and order."""
    key = f"{customer_id}|{product_id}|{order_id}"
    return str(uuid.uuid5(_REVIEW_NAMESPACE, key))


def check_rating(rating):
    """Reject anything but an integer from 1 to 5."""
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise InvalidRating({"rating": ["Rating must be an integer between 1 and 5"]})
    return rating


def parse_status(status) -> ReviewStatus:
    try:
        return ReviewStatus(status)
    except ValueError:
        raise InvalidStatus({"status": [f"Unknown review status: {status}"]}) from None


def clean_images(images) -> list[str]:
    """Validate image URLs and return them in their original order."""
    urls = list(images or [])
    if len(urls) > MAX_IMAGES:
        raise ValidationError({"images": [f"Cannot attach more than {MAX_IMAGES} images to a review"]})
    invalid = [url for url in urls if not isinstance(url, str) or not _IMAGE_URL.match(url)]
    if invalid:
        raise ValidationError({"images": [f"{url} is not a valid image URL" for url in invalid]})
    return urls


def _clean_text(value) -> str:
    return (value or "").strip()


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@reviews.value_object(part_of="Review")
class Rating:
    """A star rating from 1 to 5."""

    score = Integer(required=True)

    @invariant.post
    def score_must_be_in_range(self):
        if self.score is not None and (self.score < 1 or self.score > 5):
            raise ValidationError({"score": ["Rating must be between 1 and 5"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@reviews.entity(part_of="Review")
class ReviewVote:
    """A like or dislike cast on someone else's review."""

    customer_id = Identifier(required=True)
    vote_type = String(choices=VoteType, required=True)
    voted_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@reviews.aggregate
class Review:
    """A customer's review of a product from a delivered order."""

    # Core identifiers
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    order_id = Identifier(required=True)

    # Content
    rating = ValueObject(Rating, required=True)
    title = String(max_length=TITLE_MAX_LENGTH, default="")
    comment = Text(default="")
    images = Text()  # JSON array of image URLs

    # Verification
    verified_purchase = Boolean(default=False)

    # Status
    status = String(choices=ReviewStatus, default=ReviewStatus.VISIBLE.value)

    # Voting
    votes = HasMany(ReviewVote)
    likes = Integer(default=0)
    dislikes = Integer(default=0)

    # Timestamps
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def comment_within_length(self):
        if self.comment and len(self.comment) > COMMENT_MAX_LENGTH:
            raise ValidationError({"comment": [f"Comment cannot exceed {COMMENT_MAX_LENGTH} characters"]})

    @invariant.post
    def images_cannot_exceed_maximum(self):
        if len(self.image_urls) > MAX_IMAGES:
            raise ValidationError({"images": [f"Cannot attach more than {MAX_IMAGES} images to a review"]})

    @invariant.post
    def vote_counters_not_negative(self):
        if (self.likes or 0) < 0 or (self.dislikes or 0) < 0:
            raise ValidationError({"votes": ["Vote counters cannot be negative"]})

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def image_urls(self) -> list[str]:
        return json.loads(self.images) if self.images else []

    @property
    def is_visible(self) -> bool:
        return self.status == ReviewStatus.VISIBLE.value

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(
        cls,
        product_id,
        customer_id,
        order_id,
        rating,
        title=None,
        comment=None,
        images=None,
        verified_purchase=False,
        status=ReviewStatus.VISIBLE.value,
    ):
        """Submit a new review."""
        check_rating(rating)
        initial = parse_status(status)
        if initial == ReviewStatus.HIDDEN:
            raise InvalidStatus({"status": ["A new review cannot start out hidden"]})
        urls = clean_images(images)
        now = datetime.now(UTC)

        review = cls(
            id=review_identity(customer_id, product_id, order_id),
            product_id=product_id,
            customer_id=customer_id,
            order_id=order_id,
            rating=Rating(score=rating),
            title=_clean_text(title),
            comment=_clean_text(comment),
            images=json.dumps(urls),
            verified_purchase=verified_purchase,
            status=initial.value,
            likes=0,
            dislikes=0,
            created_at=now,
            updated_at=now,
        )

        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                product_id=str(product_id),
                customer_id=str(customer_id),
                order_id=str(order_id),
                rating=rating,
                title=review.title,
                comment=review.comment,
                status=review.status,
                verified_purchase=str(verified_purchase),
                image_count=len(urls),
                submitted_at=now,
            )
        )

        return review

    # -------------------------------------------------------------------
    # Edit
    # -------------------------------------------------------------------
    def edit(self, edited_by, title=_UNSET, comment=_UNSET, rating=_UNSET, images=_UNSET):
        """Change review content. Returns True when the rating changed."""
        if rating is not _UNSET:
            check_rating(rating)
        if images is not _UNSET:
            images = clean_images(images)

        now = datetime.now(UTC)
        rating_changed = rating is not _UNSET and rating != self.rating.score

        with atomic_change(self):
            if title is not _UNSET:
                self.title = _clean_text(title)
            if comment is not _UNSET:
                self.comment = _clean_text(comment)
            if rating is not _UNSET:
                self.rating = Rating(score=rating)
            if images is not _UNSET:
                self.images = json.dumps(images)
            self.updated_at = now

        self.raise_(
            ReviewEdited(
                review_id=str(self.id),
                product_id=str(self.product_id),
                title=self.title,
                comment=self.comment,
                rating=self.rating.score,
                edited_by=str(edited_by),
                edited_at=now,
            )
        )
        return rating_changed

    # -------------------------------------------------------------------
    # Visibility
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate state machine transition."""
        current = ReviewStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidStatus({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def change_status(self, status, changed_by):
        """Move the review to ``status``. Returns False when nothing changed."""
        target = parse_status(status)
        if target.value == self.status:
            return False
        self._assert_can_transition(target)

        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now

        self.raise_(
            ReviewVisibilityChanged(
                review_id=str(self.id),
                product_id=str(self.product_id),
                previous_status=previous,
                status=target.value,
                changed_by=str(changed_by),
                changed_at=now,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Voting
    # -------------------------------------------------------------------
    def vote(self, customer_id, vote_type):
        """Record a like/dislike.

        Cannot vote on own review. Cannot vote twice.
        """
        if str(customer_id) == str(self.customer_id):
            raise ValidationError({"vote": ["Cannot vote on your own review"]})

        try:
            kind = VoteType(vote_type)
        except ValueError:
            raise ValidationError({"vote_type": [f"Unknown vote type: {vote_type}"]}) from None

        existing = next(
            (v for v in self.votes if str(v.customer_id) == str(customer_id)),
            None,
        )
        if existing:
            raise ValidationError({"vote": ["You have already voted on this review"]})

        now = datetime.now(UTC)
        self.add_votes(ReviewVote(customer_id=customer_id, vote_type=kind.value, voted_at=now))

        with atomic_change(self):
            if kind == VoteType.LIKE:
                self.likes = self.likes + 1
            else:
                self.dislikes = self.dislikes + 1
            self.updated_at = now

        self.raise_(
            ReviewVoteRecorded(
                review_id=str(self.id),
                voter_id=str(customer_id),
                vote_type=kind.value,
                likes=self.likes,
                dislikes=self.dislikes,
                voted_at=now,
            )
        )
