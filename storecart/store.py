# storecart/store.py
import logging
from typing import Optional

from sqlalchemy import select, insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .exceptions import CartAlreadyExistsError, CartNotFoundError, CartPersistenceError
from .models import Cart, utcnow

logger = logging.getLogger(__name__)


class CartStore:
    """Finds and creates the single cart of a user and persists its changes.

    Every operation works on a freshly loaded cart and writes it back through
    ``save``; nothing is cached between calls.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # lookup / creation

    async def find_cart(self, user_id: str) -> Optional[Cart]:
        stmt = (
            select(Cart)
            .options(selectinload(Cart.items))
            .where(Cart.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.exception("Failed to load cart for user %s", user_id)
            raise CartPersistenceError("Failed to load cart") from exc
        return result.scalar_one_or_none()

    async def get_user_cart(self, user_id: str) -> Cart:
        cart = await self.find_cart(user_id)
        if cart is None:
            raise CartNotFoundError(user_id)
        return cart

    async def get_or_create_cart(self, user_id: str) -> Cart:
        cart = await self.find_cart(user_id)
        if cart is not None:
            return cart

        if await self._insert_if_absent(user_id):
            logger.info("Created cart for user %s", user_id)
        else:
            logger.info("Cart for user %s was created concurrently, re-reading", user_id)
        return await self.find_cart(user_id)

    async def create_cart(self, user_id: str) -> Cart:
        """Explicit creation: fails instead of returning an existing cart."""
        created = await self._insert_if_absent(user_id)
        cart = await self.find_cart(user_id)
        if not created:
            raise CartAlreadyExistsError(cart)
        logger.info("Created cart for user %s", user_id)
        return cart

    async def _insert_if_absent(self, user_id: str) -> bool:
        """Insert an empty cart unless one exists; True when this call created it.

        PostgreSQL and SQLite get a single INSERT ... ON CONFLICT DO NOTHING.
        Elsewhere the unique constraint rejects the loser of a race.
        """
        now = utcnow()
        values = {
            "user_id": user_id,
            "total_amount": 0,
            "total_items": 0,
            "created_at": now,
            "updated_at": now,
        }
        dialect = self.session.bind.dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(Cart.__table__).values(**values).on_conflict_do_nothing(index_elements=["user_id"])
        elif dialect == "sqlite":
            stmt = sqlite_insert(Cart.__table__).values(**values).on_conflict_do_nothing(index_elements=["user_id"])
        else:
            stmt = insert(Cart.__table__).values(**values)

        try:
            result = await self.session.execute(stmt)
            created = result.rowcount == 1
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            return False
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.exception("Failed to create cart for user %s", user_id)
            raise CartPersistenceError("Failed to create cart") from exc
        return created

    # write path

    async def save(self, cart: Cart) -> Cart:
        """Recompute totals, commit, and return the stored cart.

        On failure the session is rolled back, so the in-memory change is lost
        together with the failed write.
        """
        user_id = cart.user_id
        cart.calculate_totals()
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.exception("Failed to save cart for user %s", user_id)
            raise CartPersistenceError("Failed to save cart") from exc
        return await self.find_cart(user_id)

    # per-user operations

    async def add_product_to_cart(self, user_id, product_id, name, price, image="", category="") -> Cart:
        cart = await self.get_or_create_cart(user_id)
        cart.add_product(product_id, name, price, image=image, category=category)
        return await self.save(cart)

    async def remove_product_from_cart(self, user_id, product_id) -> Cart:
        cart = await self.get_or_create_cart(user_id)
        cart.remove_product(product_id)
        return await self.save(cart)

    async def update_product_quantity(self, user_id, product_id, quantity) -> Cart:
        cart = await self.get_or_create_cart(user_id)
        cart.update_quantity(product_id, quantity)
        return await self.save(cart)

    async def increase_product_quantity(self, user_id, product_id) -> Cart:
        cart = await self.get_or_create_cart(user_id)
        cart.increase_quantity(product_id)
        return await self.save(cart)

    async def decrease_product_quantity(self, user_id, product_id) -> Cart:
        cart = await self.get_or_create_cart(user_id)
        cart.decrease_quantity(product_id)
        return await self.save(cart)

    async def clear_user_cart(self, user_id) -> Cart:
        cart = await self.get_or_create_cart(user_id)
        cart.clear_cart()
        return await self.save(cart)
