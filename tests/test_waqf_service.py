from datetime import datetime, timezone

import pytest

from core.exceptions import NotFoundError, ValidationFailedError
from schemas.cause import CauseCreate
from schemas.document import ListOrderField
from schemas.donation import AllocationItem, AnalyticsPeriod, DonationCreate
from schemas.report import ReportType
from schemas.waqf import DonorInfo, ImpactMetrics, WaqfCreate, WaqfStatus, WaqfUpdate
from services.cause_service import CauseService
from services.report_service import ReportService, format_currency, format_rate
from services.waqf_service import WaqfService, group_by, period_key


def waqf_data(name="Family Waqf", capital=1000.0, causes=None):
    return WaqfCreate(
        name=name,
        donor=DonorInfo(name="Aisha", email="aisha@example.com"),
        initial_capital=capital,
        selected_causes=causes or [],
    )


def at(year, month, day=1):
    return datetime(year, month, day, tzinfo=timezone.utc)


async def make_cause(db, name="Water"):
    return await CauseService(db).create_cause(
        CauseCreate(name=name, description="Clean water wells for rural villages."), "admin"
    )


class TestHelpers:
    def test_period_key(self):
        date = at(2024, 5, 17)
        assert period_key(date, AnalyticsPeriod.MONTHLY) == "2024-05"
        assert period_key(date, AnalyticsPeriod.QUARTERLY) == "2024-Q2"
        assert period_key(date, AnalyticsPeriod.YEARLY) == "2024"

    def test_group_by(self):
        assert group_by([1, 2, 3, 4], lambda n: "even" if n % 2 == 0 else "odd") == {
            "odd": [1, 3], "even": [2, 4],
        }

    def test_formatting(self):
        assert format_currency(1234.5) == "$1,234.50"
        assert format_currency(10, "EUR") == "EUR 10.00"
        assert format_rate(0.756) == "76%"
        assert format_rate(None) is None


class TestWaqfProfiles:
    @pytest.mark.anyio
    async def test_create_starts_active_with_capital_as_balance(self, db):
        cause = await make_cause(db)
        waqf = await WaqfService(db).create_waqf(waqf_data(causes=[cause.id]), "donor-1")

        assert waqf.status == WaqfStatus.ACTIVE
        assert waqf.created_by == "donor-1"
        assert waqf.financial.current_balance == 1000.0
        assert waqf.financial.total_donations == 0.0
        assert waqf.waqf_assets == []

        fetched = await WaqfService(db).get_waqf(waqf.id)
        assert fetched.id == waqf.id
        assert fetched.selected_causes == [cause.id]

    @pytest.mark.anyio
    async def test_unknown_cause_rejected(self, db):
        with pytest.raises(NotFoundError):
            await WaqfService(db).create_waqf(waqf_data(causes=["missing"]), "donor-1")

    @pytest.mark.anyio
    async def test_get_missing(self, db):
        with pytest.raises(NotFoundError) as exc_info:
            await WaqfService(db).get_waqf("missing")
        assert exc_info.value.detail == "Waqf not found"

    @pytest.mark.anyio
    async def test_batch_create_and_list_by_owner(self, db):
        service = WaqfService(db)
        await service.create_waqfs([waqf_data("A"), waqf_data("B")], "donor-1")
        await service.create_waqf(waqf_data("C"), "donor-2")

        assert len(await service.list_waqfs()) == 3
        assert sorted(w.name for w in await service.list_waqfs(created_by="donor-1")) == ["A", "B"]

    @pytest.mark.anyio
    async def test_paginated(self, db):
        service = WaqfService(db)
        for name in ["A", "B", "C"]:
            await service.create_waqf(waqf_data(name), "donor-1")

        page = await service.get_paginated_waqfs(limit=2, page=2, sort_by=ListOrderField.CREATED_AT, sort_order="asc")
        assert page.total == 3
        assert page.total_pages == 2
        assert [w.name for w in page.items] == ["C"]

    @pytest.mark.anyio
    async def test_update(self, db):
        service = WaqfService(db)
        waqf = await service.create_waqf(waqf_data(), "donor-1")

        updated = await service.update_waqf(waqf.id, WaqfUpdate(
            description="For the family",
            impact_metrics=ImpactMetrics(beneficiaries_supported=40, completion_rate=0.5),
        ), "donor-1")

        assert updated.name == "Family Waqf"
        assert updated.description == "For the family"
        assert updated.financial.impact_metrics.beneficiaries_supported == 40
        assert updated.financial.current_balance == 1000.0

    @pytest.mark.anyio
    async def test_update_ignores_nulls(self, db):
        service = WaqfService(db)
        waqf = await service.create_waqf(waqf_data(), "donor-1")

        data = WaqfUpdate.model_validate({"name": None, "donor": None, "description": "Renamed"})
        updated = await service.update_waqf(waqf.id, data, "donor-1")
        assert updated.name == "Family Waqf"
        assert updated.donor.name == "Aisha"

        fetched = await service.get_waqf(waqf.id)
        assert fetched.name == "Family Waqf"
        assert fetched.description == "Renamed"
        assert [w.id for w in await service.list_waqfs()] == [waqf.id]

    @pytest.mark.anyio
    async def test_update_with_empty_body_keeps_profile(self, db):
        service = WaqfService(db)
        waqf = await service.create_waqf(waqf_data(), "donor-1")

        updated = await service.update_waqf(waqf.id, WaqfUpdate(), "donor-1")
        assert updated.name == waqf.name
        assert updated.description == waqf.description
        assert updated.selected_causes == waqf.selected_causes

    @pytest.mark.anyio
    async def test_status_transitions(self, db):
        service = WaqfService(db)
        waqf = await service.create_waqf(waqf_data(), "donor-1")

        assert (await service.deactivate_waqf(waqf.id, "donor-1")).status == WaqfStatus.INACTIVE
        assert (await service.activate_waqf(waqf.id, "donor-1")).status == WaqfStatus.ACTIVE
        await service.archive_waqf(waqf.id, "donor-1")
        assert (await service.get_waqf(waqf.id)).status == WaqfStatus.ARCHIVED


class TestDonationsAndAllocations:
    @pytest.mark.anyio
    async def test_donation_updates_financials(self, db):
        service = WaqfService(db)
        waqf = await service.create_waqf(waqf_data(), "donor-1")

        donation = await service.record_donation(DonationCreate(waqf_id=waqf.id, amount=250), "donor-1")
        assert donation.status.value == "completed"

        waqf = await service.get_waqf(waqf.id)
        assert waqf.financial.total_donations == 250
        assert waqf.financial.current_balance == 1250
        assert [c.donation_id for c in waqf.waqf_assets] == [donation.id]
        assert [d.id for d in await service.get_waqf_donations(waqf.id)] == [donation.id]

    @pytest.mark.anyio
    async def test_archived_waqf_rejects_donations(self, db):
        service = WaqfService(db)
        waqf = await service.create_waqf(waqf_data(), "donor-1")
        await service.archive_waqf(waqf.id, "donor-1")

        with pytest.raises(ValidationFailedError):
            await service.record_donation(DonationCreate(waqf_id=waqf.id, amount=10), "donor-1")

    @pytest.mark.anyio
    async def test_allocation_moves_funds_to_causes(self, db):
        service = WaqfService(db)
        water = await make_cause(db, "Water")
        school = await make_cause(db, "School")
        waqf = await service.create_waqf(waqf_data(capital=500), "donor-1")

        group = await service.allocate_returns(waqf.id, [
            AllocationItem(cause_id=water.id, amount=100),
            AllocationItem(cause_id=school.id, amount=50),
        ], "admin")
        assert group.total_amount == 150

        waqf = await service.get_waqf(waqf.id)
        assert waqf.financial.current_balance == 350
        assert waqf.financial.total_distributed == 150
        assert waqf.financial.cause_allocations == {water.id: 100, school.id: 50}
        assert (await CauseService(db).get_cause(water.id)).funds_raised == 100
        assert [g.id for g in await service.get_waqf_allocations(waqf.id)] == [group.id]

    @pytest.mark.anyio
    async def test_allocation_rules(self, db):
        service = WaqfService(db)
        water = await make_cause(db)
        waqf = await service.create_waqf(waqf_data(capital=100), "donor-1")

        with pytest.raises(ValidationFailedError):
            await service.allocate_returns(waqf.id, [], "admin")
        with pytest.raises(NotFoundError):
            await service.allocate_returns(waqf.id, [AllocationItem(cause_id="missing", amount=1)], "admin")
        with pytest.raises(ValidationFailedError):
            await service.allocate_returns(waqf.id, [AllocationItem(cause_id=water.id, amount=101)], "admin")

        assert (await service.get_waqf(waqf.id)).financial.current_balance == 100


class TestAnalytics:
    async def seed(self, db):
        service = WaqfService(db)
        cause = await make_cause(db)
        waqf = await service.create_waqf(waqf_data(capital=0), "donor-1")
        await service.record_donations([
            DonationCreate(waqf_id=waqf.id, amount=100, date=at(2024, 1, 10)),
            DonationCreate(waqf_id=waqf.id, amount=50, date=at(2024, 1, 20)),
            DonationCreate(waqf_id=waqf.id, amount=300, date=at(2024, 4, 2)),
        ], "donor-1")
        await service.allocate_returns(waqf.id, [AllocationItem(cause_id=cause.id, amount=150)], "admin")
        return service, waqf

    @pytest.mark.anyio
    async def test_performance(self, db):
        service, waqf = await self.seed(db)
        performance = await service.get_waqf_performance(waqf.id)

        assert performance.total_donations == 450
        assert performance.total_allocations == 150
        assert performance.net_growth == 300
        assert performance.donation_count == 3
        assert performance.allocation_count == 1

    @pytest.mark.anyio
    async def test_analytics_groups_by_period(self, db):
        service, waqf = await self.seed(db)

        monthly = await service.get_waqf_analytics(waqf.id, AnalyticsPeriod.MONTHLY)
        assert sorted(monthly.donations) == ["2024-01", "2024-04"]
        assert len(monthly.donations["2024-01"]) == 2

        quarterly = await service.get_waqf_analytics(waqf.id, AnalyticsPeriod.QUARTERLY)
        assert sorted(quarterly.donations) == ["2024-Q1", "2024-Q2"]

    @pytest.mark.anyio
    async def test_growth(self, db):
        service, waqf = await self.seed(db)

        assert await service.calculate_donation_growth_rate(waqf.id, AnalyticsPeriod.MONTHLY) == 100.0
        assert await service.calculate_donation_growth_rate(waqf.id, AnalyticsPeriod.YEARLY) == 0.0

        growth = await service.calculate_growth(waqf.id)
        assert growth.absolute_growth == 300
        assert growth.relative_growth == 200.0

    @pytest.mark.anyio
    async def test_growth_without_allocations(self, db):
        service = WaqfService(db)
        waqf = await service.create_waqf(waqf_data(), "donor-1")
        assert (await service.calculate_growth(waqf.id)).relative_growth == 100.0


class TestReports:
    @pytest.mark.anyio
    async def test_reports(self, db):
        service = WaqfService(db)
        waqf = await service.create_waqf(waqf_data(capital=1000), "donor-1")
        await service.record_donation(DonationCreate(waqf_id=waqf.id, amount=234.5), "donor-1")
        await service.update_waqf(waqf.id, WaqfUpdate(
            impact_metrics=ImpactMetrics(beneficiaries_supported=12, projects_completed=2, completion_rate=0.25),
        ), "donor-1")

        reports = ReportService(db)
        financial = await reports.get_report(waqf.id, ReportType.FINANCIAL)
        assert financial.total_donations == "$234.50"
        assert financial.current_balance == "$1,234.50"
        assert financial.completion_rate == "25%"

        impact = await reports.get_report(waqf.id, ReportType.IMPACT)
        assert impact.beneficiaries_supported == 12
        assert impact.projects_completed == 2

        contributions = await reports.get_report(waqf.id, ReportType.CONTRIBUTIONS)
        assert contributions.contribution_count == 1
        assert contributions.total_contributed == "$234.50"
