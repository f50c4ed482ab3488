"""Trades, capital and the aggregates behind the dashboard and reports."""
from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from tradejournal.core.models import Capital, Trade

RECENT_TRADES_LIMIT = 5


@dataclass(frozen=True)
class MonthStats:
    total: float
    profitable_days: int
    loss_days: int


@dataclass
class DashboardSummary:
    capital: Capital | None
    mtd_profit: float
    total_profit: float
    recent_trades: list[Trade]
    trade_count: int
    win_rate: float


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """First and last instant of a calendar month."""
    last_day = monthrange(year, month)[1]
    start = datetime(year, month, 1)
    end = datetime.combine(date(year, month, last_day), time.max)
    return start, end


def total_profit(trades: Iterable[Trade]) -> float:
    return sum(t.amount for t in trades)


def win_rate(winning: int, total: int) -> float:
    """Percent of trades with positive P/L."""
    if not total:
        return 0.0
    return winning / total * 100


def month_stats(trades: list[Trade]) -> MonthStats:
    return MonthStats(
        total=total_profit(trades),
        profitable_days=sum(1 for t in trades if t.amount > 0),
        loss_days=sum(1 for t in trades if t.amount < 0),
    )


async def list_trades(
    session: AsyncSession,
    user_id: int | None = None,
    year: int | None = None,
    month: int | None = None,
    limit: int | None = None,
) -> list[Trade]:
    query = select(Trade).order_by(Trade.date.desc(), Trade.id.desc())
    if user_id is not None:
        query = query.where(Trade.user_id == user_id)
    if year is not None and month is not None:
        start, end = month_bounds(year, month)
        query = query.where(Trade.date >= start, Trade.date <= end)
    if limit is not None:
        query = query.limit(limit)
    result = await session.execute(query)
    return list(result.scalars().all())


async def create_trade(
    session: AsyncSession,
    user_id: int,
    amount: float,
    trade_date: datetime,
    note: str | None = None,
) -> Trade:
    trade = Trade(user_id=user_id, amount=amount, note=note, date=trade_date)
    session.add(trade)
    await session.commit()
    await session.refresh(trade)
    return trade


async def latest_capital(session: AsyncSession) -> Capital | None:
    return await session.scalar(
        select(Capital).order_by(Capital.created_at.desc(), Capital.id.desc()).limit(1)
    )


async def create_capital(
    session: AsyncSession,
    amount_birr: float,
    amount_usd: float,
    exchange_rate: float,
    created_by: int | None = None,
) -> Capital:
    capital = Capital(
        amount_birr=amount_birr,
        amount_usd=amount_usd,
        exchange_rate=exchange_rate,
        created_by=created_by,
    )
    session.add(capital)
    await session.commit()
    await session.refresh(capital)
    return capital


async def dashboard_summary(session: AsyncSession, today: date | None = None) -> DashboardSummary:
    """Journal-wide summary: capital, month-to-date and all-time profit."""
    today = today or datetime.utcnow().date()
    start, end = month_bounds(today.year, today.month)

    mtd_profit = await session.scalar(
        select(func.coalesce(func.sum(Trade.amount), 0.0))
        .where(Trade.date >= start, Trade.date <= end)
    )
    totals = await session.execute(
        select(
            func.count(Trade.id),
            func.coalesce(func.sum(Trade.amount), 0.0),
            func.count(Trade.id).filter(Trade.amount > 0),
        )
    )
    trade_count, profit, winning = totals.one()

    return DashboardSummary(
        capital=await latest_capital(session),
        mtd_profit=float(mtd_profit or 0.0),
        total_profit=float(profit or 0.0),
        recent_trades=await list_trades(session, limit=RECENT_TRADES_LIMIT),
        trade_count=trade_count or 0,
        win_rate=win_rate(winning or 0, trade_count or 0),
    )


async def monthly_report(
    session: AsyncSession, user_id: int, year: int, month: int
) -> tuple[list[Trade], MonthStats]:
    trades = await list_trades(session, user_id=user_id, year=year, month=month)
    return trades, month_stats(trades)
