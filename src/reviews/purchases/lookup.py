"""Purchase checks used when reviews are written and removed."""

from protean.utils.globals import current_domain

from reviews.purchases.verified_purchases import VerifiedPurchases


def find_purchase(customer_id, product_id, order_id) -> VerifiedPurchases | None:
    """The delivered-order record entitling the customer to review the product."""
    results = (
        current_domain.repository_for(VerifiedPurchases)
        ._dao.query.filter(
            customer_id=str(customer_id),
            product_id=str(product_id),
            order_id=str(order_id),
        )
        .all()
    )
    return results.first


def mark_reviewed(purchase: VerifiedPurchases | None, reviewed: bool) -> None:
    if purchase is None or purchase.reviewed == reviewed:
        return
    purchase.reviewed = reviewed
    current_domain.repository_for(VerifiedPurchases).add(purchase)
