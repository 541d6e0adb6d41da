"""Cross-domain event contracts for Ordering domain events.

These classes define the event shape for consumption by other domains.
They are registered as external events via domain.register_external_event()
with matching __type__ strings so Protean's stream deserialization works
correctly.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, Text


class OrderDelivered(BaseEvent):
    """An order was delivered to the customer.

    Consumed by the Reviews domain to track verified purchases.
    """

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier()
    items = Text()  # JSON list of {product_id, variant_id}
    delivered_at = DateTime(required=True)
