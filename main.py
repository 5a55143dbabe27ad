from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from agrimart.core.config import settings
from agrimart.core.database import connect_to_mongo, close_mongo_connection
from agrimart.core.errors import register_exception_handlers
from agrimart.core.log import setup_logging
from agrimart.api import admin, auth, cart, dashboard, orders, products, reviews, state

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle management: connexion/déconnexion DB"""
    await connect_to_mongo()
    yield
    await close_mongo_connection()


app = FastAPI(
    title="AgriMart API",
    description="Boutique et back-office de machines agricoles",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["*"],
    max_age=3600
)

register_exception_handlers(app)

# Routes avec /api prefix
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(products.router, prefix="/api/products", tags=["Products"])
app.include_router(reviews.router, prefix="/api/products", tags=["Reviews"])
app.include_router(cart.router, prefix="/api/cart", tags=["Cart"])
app.include_router(orders.checkout_router, prefix="/api/checkout", tags=["Checkout"])
app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])
app.include_router(state.router, prefix="/api/state", tags=["State"])
app.include_router(dashboard.router, prefix="/api/admin/dashboard", tags=["Admin"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])


@app.get("/")
async def root():
    return {
        "message": "AgriMart API",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=True
    )
