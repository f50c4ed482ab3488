import asyncio
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tradejournal.core.config import Settings, get_settings
from tradejournal.core.logger import setup_logger
from tradejournal.core.database import make_engine, make_session_factory, init_db
from tradejournal.webapp.routes import router as webapp_router


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    logger = setup_logger(debug=settings.debug)
    engine = make_engine(settings.database_url)
    session_factory = make_session_factory(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting trading journal API...")

        await init_db(engine)
        logger.info("Database initialized")

        if not settings.bot_token:
            logger.error("BOT_TOKEN is not set: every initData check will fail")

        bot = polling_task = None
        if settings.bot_polling and settings.bot_token:
            from tradejournal.bot.bot import create_bot

            bot, dp = create_bot(settings, session_factory)
            polling_task = asyncio.create_task(dp.start_polling(bot))
            logger.info("Bot polling started")
        yield
        logger.info("Shutting down...")
        if polling_task:
            polling_task.cancel()
            await bot.session.close()
        await engine.dispose()

    app = FastAPI(title="Trading Journal API", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["Content-Type", "X-Telegram-Init-Data"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        # no "input" key: NaN and Infinity cannot be JSON-encoded
        details = [
            {"loc": err["loc"], "msg": err["msg"], "type": err["type"]}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"error": "Validation error", "details": jsonable_encoder(details)},
        )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    app.include_router(webapp_router)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=get_settings().debug)
