"""Shared fixtures: in-memory database, one seeded user per role, actor contexts and an HTTP client."""

import os

# Settings are cached on first use, so the environment must be set before any app import.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENABLE_RATE_LIMITER"] = "false"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"

from decimal import Decimal
from typing import Dict, List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from main import app
from apps.procurement_requests.schemas import (
    AdminReviewRequest,
    ProcurementRequestCreate,
    ProcurementRequestOut,
    RequestItemCreate,
    VendorOptionIn,
    VendorOptionItemIn,
)
from apps.procurement_requests.service import ProcurementRequestService
from common.context import ActorContext
from common.jwt import create_access_token
from constants.roles import Role
from models.base import Base, get_db
from models.organization import Organization
from models.user import User

# Unit prices per vendor for the Laptop x2 / Mouse x5 request.
VENDOR_PRICES = [
    ("Alpha Supplies", {"Laptop": "1000.00", "Mouse": "20.00"}),  # 2100.00
    ("Beta Traders", {"Laptop": "950.00", "Mouse": "25.00"}),  # 2025.00
    ("Gamma Wholesale", {"Laptop": "1100.00", "Mouse": "15.00"}),  # 2275.00
]


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def org(db) -> Organization:
    org = Organization(name="Acme Corp")
    db.add(org)
    await db.commit()
    return org


@pytest_asyncio.fixture
async def users(db, org) -> Dict[Role, User]:
    """One active user per role in the primary organization."""
    created = {}
    for role in Role:
        slug = role.value.lower().replace(" ", "-")
        user = User(org_id=org.id, email=f"{slug}@acme.test", full_name=f"{role.value} User", role=role.value)
        db.add(user)
        created[role] = user
    await db.commit()
    return created


@pytest_asyncio.fixture
async def second_hod(db, org) -> User:
    user = User(org_id=org.id, email="hod2@acme.test", full_name="Second HoD", role=Role.HEAD_OF_DEPARTMENT.value)
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def other_org_admin(db) -> User:
    other = Organization(name="Globex")
    db.add(other)
    await db.flush()
    user = User(org_id=other.id, email="admin@globex.test", full_name="Globex Admin", role=Role.ADMIN.value)
    db.add(user)
    await db.commit()
    return user


def make_actor(user: User) -> ActorContext:
    return ActorContext(user_id=user.id, org_id=user.org_id, role=Role(user.role))


@pytest.fixture
def actor(users):
    """actor(Role.ADMIN) -> ActorContext for the seeded user holding that role."""
    # Built eagerly: a rollback inside a test expires the ORM objects.
    contexts = {role: make_actor(user) for role, user in users.items()}

    def _actor(role: Role) -> ActorContext:
        return contexts[role]

    return _actor


@pytest.fixture
def second_hod_actor(second_hod) -> ActorContext:
    return make_actor(second_hod)


@pytest.fixture
def other_org_actor(other_org_admin) -> ActorContext:
    return make_actor(other_org_admin)


@pytest.fixture
def request_payload() -> ProcurementRequestCreate:
    return ProcurementRequestCreate(
        title="Office equipment",
        overall_reason="Onboarding two new engineers",
        items=[
            RequestItemCreate(item_name="Laptop", quantity=2, justification="Development machines"),
            RequestItemCreate(item_name="Mouse", quantity=5),
        ],
    )


def build_vendors(request: ProcurementRequestOut, prices=VENDOR_PRICES) -> List[VendorOptionIn]:
    """Price every item of `request` for each (vendor name, {item name: unit price}) entry."""
    vendors = []
    for vendor_name, unit_prices in prices:
        vendors.append(
            VendorOptionIn(
                vendor_name=vendor_name,
                items=[
                    VendorOptionItemIn(request_item_id=item.id, unit_price=Decimal(unit_prices[item.item_name]))
                    for item in request.items
                ],
            )
        )
    return vendors


@pytest.fixture
def vendors_for():
    return build_vendors


@pytest_asyncio.fixture
async def pending_request(db, actor, request_payload) -> int:
    result = await ProcurementRequestService.create_request(db, actor(Role.HEAD_OF_DEPARTMENT), request_payload)
    return result["requestId"]


@pytest_asyncio.fixture
async def approved_request(db, actor, pending_request) -> int:
    await ProcurementRequestService.admin_review(
        db, actor(Role.ADMIN), pending_request, AdminReviewRequest(decision="Approved")
    )
    return pending_request


@pytest_asyncio.fixture
async def quoted_request(db, actor, approved_request) -> int:
    logistics = actor(Role.LOGISTICS)
    request = await ProcurementRequestService.get_request(db, logistics, approved_request)
    await ProcurementRequestService.submit_vendor_options(db, logistics, approved_request, build_vendors(request))
    return approved_request


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(users):
    tokens = {role: create_access_token(user.id, user.org_id) for role, user in users.items()}

    def _headers(role_or_user) -> Dict[str, str]:
        if isinstance(role_or_user, User):
            token = create_access_token(role_or_user.id, role_or_user.org_id)
        else:
            token = tokens[role_or_user]
        return {"Authorization": f"Bearer {token}"}

    return _headers
