"""VerifiedPurchases maps customer+product+order to a delivered order.

Populated by the OrderDelivered cross-domain event handler. ``reviewed`` is
set while a review for the purchase exists.
"""

from protean.fields import Boolean, DateTime, Identifier, String

from reviews.domain import reviews


@reviews.projection
class VerifiedPurchases:
    vp_id = Identifier(identifier=True, required=True)
    customer_id = String(required=True)
    product_id = String(required=True)
    variant_id = String()
    order_id = String(required=True)
    delivered_at = DateTime(required=True)
    reviewed = Boolean(default=False)
