from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from api.models import OrganizationSplitRules, PlatformSetting
from config import ENV


@dataclass(frozen=True)
class FeePolicy:
    percentage_points: Decimal
    fixed_cents: int
    release_days: int

    def platform_fee_cents(self, total_cents: int) -> int:
        variable = (Decimal(total_cents) * self.percentage_points / 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return int(variable) + self.fixed_cents


async def resolve_fee_policy(session: AsyncSession, organization_id: uuid.UUID, env: ENV | None = None) -> FeePolicy:
    """
    Organization rules win over the global platform settings,
    which win over the configured defaults.
    """
    rules = await session.get(OrganizationSplitRules, organization_id)
    if rules:
        return FeePolicy(
            percentage_points=Decimal(str(rules.platform_fee_percent)),
            fixed_cents=rules.platform_fee_fixed_cents or 0,
            release_days=rules.release_days,
        )

    env = env or ENV()
    result = await session.execute(select(PlatformSetting))
    settings = {row.setting_key: row.setting_value for row in result.scalars().all()}

    platform_fees = settings.get("platform_fees") or {}
    withdrawal_rules = settings.get("withdrawal_rules") or {}

    percentage = platform_fees.get("percentage", env.PLATFORM_FEE_PERCENT)
    policy = FeePolicy(
        percentage_points=Decimal(str(percentage)),
        fixed_cents=int(platform_fees.get("fixed_cents", env.PLATFORM_FEE_FIXED_CENTS)),
        release_days=int(withdrawal_rules.get("release_days", env.RELEASE_DAYS)),
    )
    logging.debug(f"[FeePolicy] Organization {organization_id} uses platform policy {policy}")
    return policy
