from __future__ import annotations
import logging
import uuid
from typing import Any, Dict, List, Optional

import aiohttp

from config import ENV
from schemas import ReversalKind


class BeneficiaryNotifier:
    """
    Delivers alerts about debited accounts to the notification service
    (email/WhatsApp fan-out lives there). If the URL is not set, skip quietly.
    """
    def __init__(self, url: Optional[str] = None):
        self.env = ENV()
        self.url = url if url is not None else self.env.NOTIFY_WEBHOOK_URL

    async def send(self, payload: Dict[str, Any]) -> None:
        if not self.url:
            logging.info(f"[Notifier] No webhook configured, dropping alert for sale {payload.get('sale_id')}")
            return
        headers = {"Content-Type": "application/json", "X-Api-Key": self.env.SERVICE_API_TOKEN}
        async with aiohttp.ClientSession() as s:
            async with s.post(self.url, json=payload, headers=headers) as r:
                r.raise_for_status()
                await r.read()


class ReversalNotifier:
    """Hands the debited beneficiaries to a background task; never blocks the ledger."""

    async def accounts_debited(
        self,
        *,
        sale_id: uuid.UUID,
        kind: ReversalKind,
        reason: Optional[str],
        debited: List[Any],
    ) -> None:
        from ledger.bground.tasks import notify_beneficiaries

        payload = build_payload(sale_id=sale_id, kind=kind, reason=reason, debited=debited)
        notify_beneficiaries.delay(payload)
        logging.info(f"[Notifier] Queued {kind.value} alert for {len(debited)} accounts of sale {sale_id}")


def build_payload(*, sale_id: uuid.UUID, kind: ReversalKind, reason: Optional[str], debited: List[Any]) -> Dict[str, Any]:
    return {
        "sale_id": str(sale_id),
        "kind": kind.value,
        "reason": reason,
        "beneficiaries": [
            {
                "role": d.role,
                "account_id": str(d.account_id),
                "holder_name": d.holder_name,
                "amount_debited": d.amount_debited,
                "new_balance": d.new_balance,
            }
            for d in debited
        ],
    }
