from decimal import Decimal

import pytest

from apps.dashboard.service import DashboardService, fold_counts
from apps.procurement_requests.service import ProcurementRequestService
from constants.roles import Role
from constants.statuses import DeliveryStatus, normalize_delivery_status
from models.purchase_order import PurchaseOrder


def _po(org_id, user_id, number, amount, status="Approved", payment="Not Paid", delivery="Not Received"):
    return PurchaseOrder(
        org_id=org_id,
        po_number=number,
        created_by_user_id=user_id,
        vendor_name="Vendor",
        total_amount=Decimal(amount),
        status=status,
        payment_status=payment,
        delivery_status=delivery,
    )


@pytest.fixture
async def seeded_pos(db, actor):
    logistics = actor(Role.LOGISTICS)
    admin = actor(Role.ADMIN)
    rows = [
        _po(logistics.org_id, logistics.user_id, "PO-1", "100.00", status="Pending"),
        _po(logistics.org_id, logistics.user_id, "PO-2", "200.00", status="On Hold"),
        _po(logistics.org_id, logistics.user_id, "PO-3", "300.00", payment="Paid", delivery="Delivered"),
        _po(admin.org_id, admin.user_id, "PO-4", "400.00", payment="Partially Paid", delivery="Partially Delivered"),
        _po(admin.org_id, admin.user_id, "PO-5", "500.00", payment="Paid", delivery="Received Delivery"),
        _po(admin.org_id, admin.user_id, "PO-6", "600.00", status="Rejected"),
        _po(admin.org_id, admin.user_id, "PO-7", "700.00", status="Hold"),
    ]
    db.add_all(rows)
    await db.commit()
    return rows


@pytest.mark.parametrize("role", list(Role))
async def test_zero_rows_give_zero_counters(db, actor, role):
    stats = await DashboardService.get_stats(db, actor(role))
    assert stats.total == 0
    assert stats.total_amount == Decimal("0.00")
    if role in (Role.HEAD_OF_DEPARTMENT, Role.ADMIN, Role.LOGISTICS):
        assert (stats.pending, stats.approved, stats.rejected, stats.hold) == (0, 0, 0, 0)
        assert stats.procurement_requests.total == 0
    else:
        assert stats.procurement_requests is None
    if role == Role.ADMIN:
        assert stats.procurement_requests.pending_decision == 0


async def test_admin_sees_org_wide_review_counts(db, actor, seeded_pos):
    stats = await DashboardService.get_stats(db, actor(Role.ADMIN))
    assert stats.total == 7
    assert stats.total_amount == Decimal("2800.00")
    assert (stats.pending, stats.approved, stats.rejected, stats.hold) == (1, 3, 1, 2)
    assert stats.not_paid is None


async def test_logistics_counts_only_own_pos(db, actor, seeded_pos):
    stats = await DashboardService.get_stats(db, actor(Role.LOGISTICS))
    assert stats.total == 3
    assert stats.total_amount == Decimal("600.00")
    assert (stats.pending, stats.approved, stats.rejected, stats.hold) == (1, 1, 0, 1)


async def test_finance_counts_payment_over_approved(db, actor, seeded_pos):
    stats = await DashboardService.get_stats(db, actor(Role.FINANCE))
    assert stats.total == 3
    assert stats.total_amount == Decimal("1200.00")
    assert (stats.not_paid, stats.partially_paid, stats.paid) == (0, 1, 2)
    assert stats.pending is None


async def test_stores_folds_legacy_delivery_values(db, actor, seeded_pos):
    stats = await DashboardService.get_stats(db, actor(Role.STORES))
    assert stats.total == 3
    assert (stats.not_received, stats.partially_received, stats.received_delivery) == (0, 1, 2)


async def test_request_counters(db, actor, quoted_request, request_payload):
    await ProcurementRequestService.create_request(db, actor(Role.HEAD_OF_DEPARTMENT), request_payload)

    admin_stats = (await DashboardService.get_stats(db, actor(Role.ADMIN))).procurement_requests
    assert admin_stats.total == 2
    assert admin_stats.vendors_submitted == 1
    assert admin_stats.pending_admin_review == 1
    assert admin_stats.pending_decision == 1

    hod_stats = (await DashboardService.get_stats(db, actor(Role.HEAD_OF_DEPARTMENT))).procurement_requests
    assert hod_stats.total == 2
    assert hod_stats.pending_decision is None

    logistics_stats = (await DashboardService.get_stats(db, actor(Role.LOGISTICS))).procurement_requests
    assert logistics_stats.total == 1
    assert logistics_stats.vendors_submitted == 1


async def test_other_organization_is_excluded(db, seeded_pos, other_org_actor):
    stats = await DashboardService.get_stats(db, other_org_actor)
    assert stats.total == 0
    assert stats.pending == 0


def test_fold_counts_skips_unknown_values():
    rows = [("Delivered", 2), ("Received Delivery", 1), ("Lost in transit", 4), ("Not Received", None)]
    folded = fold_counts(rows, normalize_delivery_status)
    assert folded[DeliveryStatus.RECEIVED_DELIVERY] == 3
    assert folded[DeliveryStatus.NOT_RECEIVED] == 0
    assert sum(folded.values()) == 3
