from decimal import Decimal
from typing import Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fintrack.core.database import Base, get_db
from fintrack.core.permissions import Actor, Role
from fintrack.core.security import create_access_token, get_password_hash
from fintrack.models import Account, AppUser, Category, User
from main import app

PASSWORD = "secret123"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def actors(db) -> Dict[Role, Actor]:
    """One active user per role. The admin is created first."""
    result = {}
    for role in (Role.ADMIN, Role.HR, Role.MANAGER, Role.DATA_ENTRY):
        user = User(
            email=f"{role.value}@example.com",
            name=role.value.title(),
            hashed_password=get_password_hash(PASSWORD),
        )
        db.add(user)
        await db.flush()
        db.add(AppUser(user_id=user.id, role=role.value))
        result[role] = Actor(user_id=user.id, email=user.email, role=role)
    await db.commit()
    return result


@pytest.fixture
def headers(actors) -> Dict[Role, Dict[str, str]]:
    """Bearer headers per role."""
    return {
        role: {"Authorization": f"Bearer {create_access_token({'sub': str(actor.user_id)})}"}
        for role, actor in actors.items()
    }


@pytest_asyncio.fixture
async def accounts(db) -> Dict[str, Account]:
    bank = Account(name="Bank", type="current", opening_balance=Decimal("1000"), current_balance=Decimal("1000"))
    cash = Account(name="Cash", type="cash", opening_balance=Decimal("0"), current_balance=Decimal("0"))
    od = Account(name="Credit Line", type="od_cc", opening_balance=Decimal("0"), current_balance=Decimal("0"))
    db.add_all([bank, cash, od])
    await db.commit()
    return {"bank": bank, "cash": cash, "od": od}


@pytest_asyncio.fixture
async def categories(db) -> Dict[str, Category]:
    rent = Category(name="Office Rent")
    salaries = Category(name="Salaries")
    sales = Category(name="Sales Revenue", is_system=True)
    archived = Category(name="Archived", is_enabled=False)
    db.add_all([rent, salaries, sales, archived])
    await db.commit()
    return {"rent": rent, "salaries": salaries, "sales": sales, "archived": archived}
