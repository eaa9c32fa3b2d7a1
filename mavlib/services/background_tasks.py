"""Background work started from the application lifespan.

Both coroutines run on the API server's event loop:
  - ``load_catalog_task`` fills the Catalog Store and flips it to ``ready``.
  - ``overdue_sweep_loop`` refreshes overdue flags on a fixed interval,
    independent of user actions.
"""

import asyncio
import logging

from mavlib.domain.repositories import ICatalogSupplier
from mavlib.domain.services import ILendingLedger
from mavlib.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


async def load_catalog_task(catalog_service: CatalogService, supplier: ICatalogSupplier) -> int:
    logger.info("BG-TASK: loading catalog from %s", type(supplier).__name__)
    count = await catalog_service.load(supplier)
    logger.info("BG-TASK: catalog loaded (%d books)", count)
    return count


async def overdue_sweep_loop(ledger: ILendingLedger, interval_seconds: float) -> None:
    """Run ``recompute_overdue`` every ``interval_seconds`` until cancelled."""
    logger.info("BG-TASK: overdue sweep every %.0fs", interval_seconds)
    while True:
        try:
            overdue = ledger.recompute_overdue()
            logger.debug("BG-TASK: overdue sweep found %d overdue loans", overdue)
        except Exception as exc:
            logger.error("BG-TASK: overdue sweep failed: %s", exc, exc_info=True)
        await asyncio.sleep(interval_seconds)
