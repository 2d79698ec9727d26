import pytest
from sqlalchemy import String, create_engine, func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column
from sqlalchemy.pool import StaticPool

from bigox.infrastructure.transactions import TransactionScope, enlist_session
from bigox.shared_kernel.exceptions import TransactionError


class Base(DeclarativeBase):
    pass


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner: Mapped[str] = mapped_column(String(50))


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False})
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


def count_accounts(engine) -> int:
    with Session(engine) as session:
        return session.scalar(select(func.count()).select_from(Account))


@pytest.mark.asyncio
async def test_session_commits_with_completed_scope(engine):
    with Session(engine) as session:
        async with TransactionScope() as scope:
            enlist_session(session)
            session.add(Account(owner="ada"))
            scope.complete()

    assert count_accounts(engine) == 1


@pytest.mark.asyncio
async def test_session_rolls_back_when_scope_fails(engine):
    with Session(engine) as session:
        with pytest.raises(RuntimeError):
            async with TransactionScope():
                enlist_session(session)
                session.add(Account(owner="grace"))
                session.flush()
                raise RuntimeError("Boom")

    assert count_accounts(engine) == 0


@pytest.mark.asyncio
async def test_async_session_is_committed():
    async_engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with async_engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)

    async with AsyncSession(async_engine) as session:
        async with TransactionScope() as scope:
            enlist_session(session)
            session.add(Account(owner="linus"))
            scope.complete()

    async with AsyncSession(async_engine) as session:
        total = await session.scalar(select(func.count()).select_from(Account))
    await async_engine.dispose()

    assert total == 1


def test_enlisting_without_ambient_transaction_fails(engine):
    with Session(engine) as session:
        with pytest.raises(TransactionError):
            enlist_session(session)
