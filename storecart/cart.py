# storecart/cart.py
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from .database import get_session
from .models import Cart
from .schemas import (
    CartAddRequest, CartCreateRequest, CartData, CartItemsData, CartLineOut,
    CartOut, CartSummary, CartSummaryData, ProductRefRequest, QuantityUpdateRequest,
)
from .store import CartStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cart", tags=["cart"])


def get_cart_store(session: AsyncSession = Depends(get_session)) -> CartStore:
    return CartStore(session)


def envelope(message: str, data=None, success: bool = True) -> dict:
    return {"success": success, "message": message, "data": data}


def cart_payload(cart: Cart, with_is_empty: bool = False) -> dict:
    """Full cart, its summary and formatted total, ready for JSON."""
    data = CartData(
        cart=CartOut.model_validate(cart),
        summary=CartSummary.model_validate(cart.get_cart_summary()),
        formatted_total=cart.formatted_total,
        is_empty=cart.is_empty() if with_is_empty else None,
    )
    return data.model_dump(by_alias=True, mode="json", exclude_none=True)


# 🆕 Explicit creation: 409 when the user already has a cart
@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_cart(payload: CartCreateRequest, store: CartStore = Depends(get_cart_store)):
    cart = await store.create_cart(payload.user_id)
    return envelope("Cart created successfully", cart_payload(cart, with_is_empty=True))


@router.post("/add", status_code=status.HTTP_201_CREATED)
async def add_to_cart(payload: CartAddRequest, store: CartStore = Depends(get_cart_store)):
    cart = await store.add_product_to_cart(
        payload.user_id,
        payload.product_id,
        payload.name,
        payload.price,
        image=payload.image or "",
        category=payload.category or "",
    )
    logger.debug("Added product %s to cart of user %s", payload.product_id, payload.user_id)
    return envelope("Product added to cart successfully", cart_payload(cart))


@router.get("/{user_id}")
async def get_cart(user_id: str, store: CartStore = Depends(get_cart_store)):
    cart = await store.get_user_cart(user_id)
    return envelope("Cart retrieved successfully", cart_payload(cart, with_is_empty=True))


@router.put("/{user_id}/quantity")
async def update_quantity(user_id: str, payload: QuantityUpdateRequest, store: CartStore = Depends(get_cart_store)):
    cart = await store.update_product_quantity(user_id, payload.product_id, payload.quantity)
    return envelope("Product quantity updated successfully", cart_payload(cart))


@router.patch("/{user_id}/increase")
async def increase_quantity(user_id: str, payload: ProductRefRequest, store: CartStore = Depends(get_cart_store)):
    cart = await store.increase_product_quantity(user_id, payload.product_id)
    return envelope("Product quantity increased successfully", cart_payload(cart))


@router.patch("/{user_id}/decrease")
async def decrease_quantity(user_id: str, payload: ProductRefRequest, store: CartStore = Depends(get_cart_store)):
    cart = await store.decrease_product_quantity(user_id, payload.product_id)
    return envelope("Product quantity decreased successfully", cart_payload(cart))


@router.delete("/{user_id}/remove")
async def remove_from_cart(user_id: str, payload: ProductRefRequest, store: CartStore = Depends(get_cart_store)):
    cart = await store.remove_product_from_cart(user_id, payload.product_id)
    return envelope("Product removed from cart successfully", cart_payload(cart))


@router.delete("/{user_id}/clear")
async def clear_cart(user_id: str, store: CartStore = Depends(get_cart_store)):
    cart = await store.clear_user_cart(user_id)
    return envelope("Cart cleared successfully", cart_payload(cart))


# 📋 Projections
@router.get("/{user_id}/items")
async def get_cart_items(user_id: str, store: CartStore = Depends(get_cart_store)):
    cart = await store.get_user_cart(user_id)
    items = cart.get_cart_items()
    data = CartItemsData(
        items=[CartLineOut.model_validate(line) for line in items],
        item_count=len(items),
    )
    return envelope("Cart items retrieved successfully", data.model_dump(by_alias=True, mode="json"))


@router.get("/{user_id}/summary")
async def get_cart_summary(user_id: str, store: CartStore = Depends(get_cart_store)):
    cart = await store.get_user_cart(user_id)
    data = CartSummaryData(
        summary=CartSummary.model_validate(cart.get_cart_summary()),
        formatted_total=cart.formatted_total,
    )
    return envelope("Cart summary retrieved successfully", data.model_dump(by_alias=True, mode="json"))
