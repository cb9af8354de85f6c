# storecart/main.py
import logging
import os

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from . import cart
from .database import engine, Base
from .exceptions import CartAlreadyExistsError, CartNotFoundError, CartPersistenceError

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="storecart",
    description="Per-user shopping cart API",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(cart.router)


# ❗ Error envelopes
@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = []
    for err in exc.errors():
        field = str(err["loc"][-1]) if err.get("loc") else "body"
        if field not in fields:
            fields.append(field)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": f"Invalid or missing fields: {', '.join(fields)}",
            "data": None,
        },
    )


@app.exception_handler(CartNotFoundError)
async def cart_not_found_handler(request: Request, exc: CartNotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=cart.envelope(exc.message, success=False),
    )


@app.exception_handler(CartAlreadyExistsError)
async def cart_exists_handler(request: Request, exc: CartAlreadyExistsError):
    data = cart.cart_payload(exc.cart) if exc.cart is not None else None
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=cart.envelope(exc.message, data, success=False),
    )


@app.exception_handler(CartPersistenceError)
async def cart_persistence_handler(request: Request, exc: CartPersistenceError):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error", "error": exc.message},
    )


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.on_event("startup")
async def on_startup():
    # development convenience; production schemas come from alembic
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


if __name__ == "__main__":
    uvicorn.run("storecart.main:app", host="0.0.0.0", port=int(os.getenv("PORT", 8000)), reload=True)
