"""
Example 03: Lifecycle Events and Modifiers

This example demonstrates subscribing to lifecycle events, handling
listener failures, and normalizing fetched values with modifiers.
"""

import asyncio
import logging

from row_model import AsyncEngine, ConnectionConfig, Event, Model, QueryBuilder


def strip(value):
    return value.strip() if isinstance(value, str) else value


def capitalize(value):
    return value.capitalize() if isinstance(value, str) else value


class Product(Model, table="products", timestamps=False, modifiers={"name": [strip, capitalize]}):
    pass


async def audit(product):
    await asyncio.sleep(0)
    print(f"   [audit] stored product #{product.id}")


async def main():
    logging.basicConfig(level=logging.INFO)

    config = ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)
    engine = AsyncEngine.from_config(config)
    await engine.run("CREATE TABLE products (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT, price REAL)")
    Product.configure(builder=QueryBuilder(engine))

    events = Product.events()

    @events.on(Event.INSERT)
    def default_price(row):
        # Pre-events receive the row before the statement is built
        row.setdefault("price", 9.99)

    events.on(Event.INSERTED, audit)
    events.on(Event.UPDATE, lambda row: 1 / 0)
    events.error_handler = lambda event, error: print(f"   [error] {event.name}: {error!r}")

    print("=== Events and Modifiers ===\n")

    print("1. Insert (pre-event fills the price, modifiers clean the name):")
    product = await Product.insert({"name": "  widget "})
    print(f"   {product}")
    await events.drain()
    print()

    print("2. A failing listener does not fail the operation:")
    product.price = 12.5
    await product.update()
    print(f"   {await Product.find(product.id)}\n")

    await engine.close()
    print("Done!")


if __name__ == "__main__":
    asyncio.run(main())
