from __future__ import annotations
from typing import Any, Dict
import asyncio
import logging

from ledger.bground import CeleryManager
from ledger.notifier import BeneficiaryNotifier

celery_app = CeleryManager()


@celery_app.celery_app.task(bind=True, max_retries=5, default_retry_delay=60, name="ledger.notify_beneficiaries")
def notify_beneficiaries(self, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Sends the list of debited beneficiaries of a refund/chargeback to the
    notification service. Retries on delivery errors; ledger state is never touched.
    """
    try:
        asyncio.run(BeneficiaryNotifier().send(payload))
    except Exception as e:
        logging.warning(f"[Notifier] Delivery for sale {payload.get('sale_id')} failed: {e}")
        raise self.retry(exc=e)
    return {"sale_id": payload.get("sale_id"), "sent": len(payload.get("beneficiaries", []))}


@celery_app.celery_app.task(name="ledger.release_matured_credits")
def release_matured_credits_task() -> int:
    from api.database import async_session_maker, engine
    from ledger.bground.releaser import release_matured_credits

    async def _run() -> int:
        async with async_session_maker() as session:
            released = await release_matured_credits(session)
        # asyncpg connections are bound to the loop that asyncio.run closes
        await engine.dispose()
        return released

    return asyncio.run(_run())
