from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tradejournal.core.config import Settings
from tradejournal.core.logger import logger
from tradejournal.core.models import Capital, Trade, User, UserRole
from tradejournal.core.services import journal
from tradejournal.webapp.dependencies import (
    get_current_user,
    get_session,
    get_settings,
    resolve_principal,
)
from tradejournal.webapp.schemas import AuthRequest, CapitalCreate, TradeCreate

router = APIRouter(prefix="/api", tags=["webapp"])


def _user_dict(user: User) -> dict:
    return {
        "id": user.id,
        "telegramId": str(user.telegram_id),
        "name": user.name,
        "role": user.role.value,
    }


def _trade_dict(t: Trade) -> dict:
    return {
        "id": t.id,
        "userId": t.user_id,
        "amount": t.amount,
        "note": t.note,
        "date": t.date.isoformat(),
        "createdAt": t.created_at.isoformat(),
    }


def _capital_dict(c: Capital | None) -> dict | None:
    if c is None:
        return None
    return {
        "id": c.id,
        "amountBirr": c.amount_birr,
        "amountUsd": c.amount_usd,
        "exchangeRate": c.exchange_rate,
        "createdAt": c.created_at.isoformat(),
    }


# --------------- auth ---------------

@router.post("/auth")
async def auth(
    body: AuthRequest,
    settings: Settings = Depends(get_settings),
    session: AsyncSession = Depends(get_session),
):
    """Exchange initData from the Mini App for the local user record."""
    user = await resolve_principal(body.init_data, settings, session)
    return {"success": True, "user": _user_dict(user)}


# --------------- trades ---------------

@router.get("/trades")
async def get_trades(
    month: int | None = Query(None, ge=1, le=12),
    year: int | None = Query(None, ge=2000, le=9999),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Trades of the current user, newest first, optionally for one month."""
    trades = await journal.list_trades(session, user_id=user.id, year=year, month=month)
    return {"trades": [_trade_dict(t) for t in trades]}


@router.post("/trades")
async def add_trade(
    body: TradeCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    trade = await journal.create_trade(
        session,
        user_id=user.id,
        amount=body.amount,
        trade_date=body.date,
        note=body.note,
    )
    logger.info("Trade %s added by user %s: %s", trade.id, user.id, trade.amount)
    return {"trade": _trade_dict(trade)}


# --------------- capital ---------------

@router.get("/capital")
async def get_capital(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return {"capital": _capital_dict(await journal.latest_capital(session))}


@router.post("/capital")
async def update_capital(
    body: CapitalCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Record a new capital snapshot (partners only)."""
    if user.role != UserRole.PARTNER:
        raise HTTPException(
            status_code=403, detail="Forbidden: Only partners can update capital"
        )
    capital = await journal.create_capital(
        session,
        amount_birr=body.amount_birr,
        amount_usd=body.amount_usd,
        exchange_rate=body.exchange_rate,
        created_by=user.id,
    )
    logger.info("Capital updated by user %s", user.id)
    return {"capital": _capital_dict(capital)}


# --------------- dashboard & reports ---------------

@router.get("/dashboard")
async def dashboard(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    summary = await journal.dashboard_summary(session)
    return {
        "capital": _capital_dict(summary.capital),
        "mtdProfit": summary.mtd_profit,
        "totalProfit": summary.total_profit,
        "recentTrades": [_trade_dict(t) for t in summary.recent_trades],
        "tradeCount": summary.trade_count,
        "winRate": summary.win_rate,
    }


@router.get("/reports")
async def reports(
    month: int | None = Query(None, ge=1, le=12),
    year: int | None = Query(None, ge=2000, le=9999),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Monthly report for the current user; defaults to the current month."""
    now = datetime.utcnow()
    year = year or now.year
    month = month or now.month
    trades, stats = await journal.monthly_report(session, user.id, year, month)
    return {
        "month": month,
        "year": year,
        "trades": [_trade_dict(t) for t in trades],
        "monthlyTotal": stats.total,
        "profitableDays": stats.profitable_days,
        "lossDays": stats.loss_days,
    }
