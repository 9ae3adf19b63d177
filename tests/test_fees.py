"""
Platform fee policy: integer-cent math and the organization -> platform -> default lookup.
"""
import uuid
from decimal import Decimal

import pytest

from api.models import Organization, PlatformSetting
from config import ENV
from ledger.fees import FeePolicy, resolve_fee_policy


class TestFeePolicy:

    def test_percentage_only(self):
        policy = FeePolicy(percentage_points=Decimal("5"), fixed_cents=0, release_days=14)
        assert policy.platform_fee_cents(10_000) == 500

    def test_fixed_part_is_added(self):
        policy = FeePolicy(percentage_points=Decimal("4.99"), fixed_cents=100, release_days=14)
        # 10000 * 4.99% = 499
        assert policy.platform_fee_cents(10_000) == 599

    def test_rounds_half_up(self):
        policy = FeePolicy(percentage_points=Decimal("2.5"), fixed_cents=0, release_days=0)
        # 999 * 2.5% = 24.975
        assert policy.platform_fee_cents(999) == 25
        # 1100 * 2.5% = 27.5
        assert policy.platform_fee_cents(1_100) == 28

    def test_result_is_int(self):
        policy = FeePolicy(percentage_points=Decimal("3.33"), fixed_cents=7, release_days=0)
        assert isinstance(policy.platform_fee_cents(12_345), int)


class TestResolveFeePolicy:

    async def test_organization_rules_win(self, session, organization):
        session.add(PlatformSetting(setting_key="platform_fees", setting_value={"percentage": 9, "fixed_cents": 50}))
        await session.commit()

        policy = await resolve_fee_policy(session, organization.id)

        assert policy.percentage_points == Decimal("5")
        assert policy.fixed_cents == 0
        assert policy.release_days == 14

    async def test_platform_settings_used_without_organization_rules(self, session):
        org = Organization(id=uuid.uuid4(), name="Sem Regras")
        session.add(org)
        session.add(PlatformSetting(setting_key="platform_fees", setting_value={"percentage": 3.5, "fixed_cents": 25}))
        session.add(PlatformSetting(setting_key="withdrawal_rules", setting_value={"release_days": 30}))
        await session.commit()

        policy = await resolve_fee_policy(session, org.id)

        assert policy == FeePolicy(percentage_points=Decimal("3.5"), fixed_cents=25, release_days=30)

    async def test_falls_back_to_configured_defaults(self, session):
        env = ENV(PLATFORM_FEE_PERCENT="4.99", PLATFORM_FEE_FIXED_CENTS=100, RELEASE_DAYS=7)

        policy = await resolve_fee_policy(session, uuid.uuid4(), env)

        assert policy.percentage_points == Decimal("4.99")
        assert policy.fixed_cents == 100
        assert policy.release_days == 7
