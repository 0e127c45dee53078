from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import db
from core.logging import configure_logging
from core.settings import env_list
from mappings import router as mappings_router
from marketplaces import router as marketplaces_router
from products import router as products_router
from sku_master import router as sku_master_router

DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

# Allow the admin frontend to call this API from the browser.
app.add_middleware(
    CORSMiddleware,
    allow_origins=env_list("CORS_ORIGINS", DEFAULT_CORS_ORIGINS),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# sku_master routes live under /products/mapping/...; register them before the
# product routes so they are matched first.
app.include_router(sku_master_router.router, prefix="/api", tags=["sku-master"])
app.include_router(products_router.router, prefix="/api", tags=["products"])
app.include_router(mappings_router.router, prefix="/api", tags=["sku-mappings"])
app.include_router(marketplaces_router.router, prefix="/api", tags=["marketplaces"])


@app.get("/api/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "pricelab catalog api"}
