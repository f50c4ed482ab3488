import asyncio
from datetime import date, datetime

import pytest

from tradejournal.core.config import Settings
from tradejournal.core.database import init_db, make_engine, make_session_factory
from tradejournal.core.models import Trade, User
from tradejournal.core.services import journal


def _trades(*amounts: float) -> list[Trade]:
    return [Trade(amount=a) for a in amounts]


def test_month_bounds_handles_leap_february() -> None:
    start, end = journal.month_bounds(2024, 2)
    assert start == datetime(2024, 2, 1)
    assert end.date() == date(2024, 2, 29)
    assert end > datetime(2024, 2, 29, 23, 59, 59)

    _, december_end = journal.month_bounds(2023, 12)
    assert december_end.date() == date(2023, 12, 31)


def test_win_rate_and_totals() -> None:
    assert journal.win_rate(0, 0) == 0.0
    assert journal.win_rate(2, 4) == 50.0
    assert journal.total_profit(_trades(10, -5, 2.5)) == 7.5


def test_month_stats_counts_profit_and_loss_days() -> None:
    stats = journal.month_stats(_trades(100, -40, 0, 15))
    assert stats.total == 75
    assert stats.profitable_days == 2
    assert stats.loss_days == 1


def test_trades_capital_and_summary(settings: Settings) -> None:
    engine = make_engine(settings.database_url)
    session_factory = make_session_factory(engine)

    async def scenario() -> None:
        await init_db(engine)
        async with session_factory() as session:
            alice = User(telegram_id=1, name="Alice")
            bob = User(telegram_id=2, name="Bob")
            session.add_all([alice, bob])
            await session.commit()

            await journal.create_trade(session, alice.id, 100.0, datetime(2024, 3, 1))
            await journal.create_trade(session, alice.id, -30.0, datetime(2024, 3, 31, 18, 0), note="stop")
            await journal.create_trade(session, alice.id, 50.0, datetime(2024, 4, 1))
            await journal.create_trade(session, bob.id, 20.0, datetime(2024, 3, 15))

            march = await journal.list_trades(session, user_id=alice.id, year=2024, month=3)
            assert [t.amount for t in march] == [-30.0, 100.0]
            assert march[0].note == "stop"

            everything = await journal.list_trades(session, user_id=alice.id)
            assert [t.amount for t in everything] == [50.0, -30.0, 100.0]

            # month filter needs both parts
            assert len(await journal.list_trades(session, user_id=alice.id, month=3)) == 3

            trades, stats = await journal.monthly_report(session, alice.id, 2024, 3)
            assert len(trades) == 2
            assert stats.total == 70.0
            assert (stats.profitable_days, stats.loss_days) == (1, 1)

            assert await journal.latest_capital(session) is None
            await journal.create_capital(session, 5500.0, 100.0, 55.0, created_by=bob.id)
            await journal.create_capital(session, 11400.0, 200.0, 57.0)
            current = await journal.latest_capital(session)
            assert current.amount_usd == 200.0
            assert current.exchange_rate == 57.0

            summary = await journal.dashboard_summary(session, today=date(2024, 3, 20))
            assert summary.mtd_profit == 90.0
            assert summary.total_profit == 140.0
            assert summary.trade_count == 4
            assert summary.win_rate == 75.0
            assert summary.capital.id == current.id
            assert [t.amount for t in summary.recent_trades] == [50.0, -30.0, 20.0, 100.0]
        await engine.dispose()

    asyncio.run(scenario())


def test_dashboard_summary_empty(settings: Settings) -> None:
    engine = make_engine(settings.database_url)
    session_factory = make_session_factory(engine)

    async def scenario() -> None:
        await init_db(engine)
        async with session_factory() as session:
            summary = await journal.dashboard_summary(session)
        assert summary.capital is None
        assert summary.mtd_profit == 0.0
        assert summary.total_profit == 0
        assert summary.recent_trades == []
        assert summary.win_rate == 0.0
        await engine.dispose()

    asyncio.run(scenario())


def test_dashboard_summary_limits_recent_trades(settings: Settings) -> None:
    engine = make_engine(settings.database_url)
    session_factory = make_session_factory(engine)

    async def scenario() -> None:
        await init_db(engine)
        async with session_factory() as session:
            user = User(telegram_id=1, name="Alice")
            session.add(user)
            await session.commit()
            for day, amount in enumerate((10.0, -4.0, 6.0, 0.0, -2.0, 8.0, 12.0), start=1):
                await journal.create_trade(session, user.id, amount, datetime(2024, 5, day))

            summary = await journal.dashboard_summary(session, today=date(2024, 5, 31))
        assert summary.trade_count == 7
        assert summary.total_profit == 30.0
        assert summary.mtd_profit == 30.0
        assert summary.win_rate == pytest.approx(4 / 7 * 100)
        assert [t.amount for t in summary.recent_trades] == [12.0, 8.0, -2.0, 0.0, 6.0]
        await engine.dispose()

    asyncio.run(scenario())
