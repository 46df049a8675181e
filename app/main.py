# app/main.py
from fastapi import FastAPI
import uvicorn

from app.api.routers import carts, health
from app.data.database import init_db
from app.utils.settings import API_HOST, API_PORT
from app.utils.logging import get_logger

logger = get_logger(__name__)

# tabele carts / cart_items, zanim ruszy pierwszy request
try:
    init_db()
    logger.info("Database tables ready")
except Exception as e:
    logger.error(f"Failed to create tables: {e}")
    raise


def create_app() -> FastAPI:
    app = FastAPI(
        title="Cart Service",
        version="1.0.0",
    )

    app.include_router(health.router)
    app.include_router(carts.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host=API_HOST, port=API_PORT)
