"""Protean Engine runner for the Reviews domain.

Consumes cross-domain events asynchronously, e.g. OrderDelivered from the
Ordering domain, which records the verified purchases reviews rely on.

Usage:
    python src/server.py
"""

import asyncio

from protean.server.engine import Engine

from reviews.utils.logging import configure_logging


async def run():
    from reviews.domain import reviews

    reviews.init()
    await Engine(reviews).run()


def main():
    configure_logging()
    asyncio.run(run())


if __name__ == "__main__":
    main()
