# app/scripts/seed_data.py
import asyncio
import logging
from app.core.db import init_db, close_db
from app.core.logging_config import configure_logging
from app.services.inventory_service import initialize_stock

log = logging.getLogger(__name__)

# product_id -> available units
SEED_STOCK = {
    1001: 50,
    1002: 30,
    1003: 100,
}

async def seed():
    # initialize_stock is idempotent: existing rows are reset to the seed level
    for product_id, quantity in SEED_STOCK.items():
        item = await initialize_stock(product_id, quantity)
        log.info(f"Seeded {item}")
    log.info("Inventory seeded.")

async def main():
    configure_logging()
    await init_db()
    try:
        await seed()
    finally:
        await close_db()

if __name__ == "__main__":
    asyncio.run(main())
