# recipeshare/main.py
# FastAPI app setup + router registration
# Routers are split per resource (recipes, users)

from __future__ import annotations

import logging
from asyncio import sleep
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from recipeshare.api.routes_recipes import router as recipes_router
from recipeshare.api.routes_users import router as users_router
from recipeshare.core.config import settings
from recipeshare.core.deps import close_stores, get_catalog, get_engagement, init_stores, mongo_db
from recipeshare.core.errors import CatalogError
from recipeshare.db.indexes import ensure_indexes
from recipeshare.scripts.seed_demo import seed

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
log = logging.getLogger(__name__)

app = FastAPI(title="Recipe Share - API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

# request-shape errors → 400 with pydantic's error list
@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )

@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Server error"})

@app.on_event("startup")
async def on_startup() -> None:
    # 1) stores first (mongo: up to 20 tries, 1s apart)
    for i in range(20):
        try:
            await init_stores()
            log.info("[startup] stores ready (backend=%s)", settings.STORE_BACKEND)
            break
        except Exception as e:
            log.warning("[startup] store init retry %d: %s", i + 1, e)
            await sleep(1.0)
    else:
        log.error("[startup] store init failed after retries")
        return

    # 2) mongo: indexes / memory: demo users + recipes
    db = mongo_db()
    if db is not None:
        try:
            await ensure_indexes(db)
            log.info("[startup] indexes ensured")
        except Exception:
            log.exception("[startup] ensure_indexes failed")
    else:
        uids = await seed(get_catalog(), get_engagement())
        log.info("[startup] memory stores seeded, demo user ids: %s", ", ".join(uids))

@app.on_event("shutdown")
async def on_shutdown() -> None:
    await close_stores()

@app.get("/")
async def root():
    return {"status": "ok"}

@app.get("/health")
async def health():
    ok = {"status": "ok", "store": settings.STORE_BACKEND, "db": "skip"}
    if settings.STORE_BACKEND == "mongo":
        db = mongo_db()
        try:
            if db is None:
                raise RuntimeError("not connected")
            await db.command("ping")
            ok["db"] = "ok"
        except Exception as e:
            ok["db"] = f"error: {e}"
    return ok

# each router declares its own prefix
app.include_router(recipes_router)
app.include_router(users_router)
