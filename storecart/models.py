# storecart/models.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Column, Integer, String, ForeignKey, DateTime, Numeric,
    CheckConstraint, UniqueConstraint, Index, event, inspect,
)
from sqlalchemy.orm import relationship, Session

from .database import Base

CENTS = Decimal("0.01")


def utcnow():
    return datetime.now(timezone.utc)


def _to_money(value) -> Decimal:
    # str() first so floats like 0.1 keep their printed value
    return Decimal(str(value)).quantize(CENTS)


class Cart(Base):
    """One cart per user; totals are always derived from ``items``."""

    __tablename__ = "carts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    total_items = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    items = relationship(
        "CartLine",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartLine.position",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("user_id", name="uq_carts_user"),  # one cart per user
        CheckConstraint("total_amount >= 0", name="ck_carts_total_amount_nonneg"),
        CheckConstraint("total_items >= 0", name="ck_carts_total_items_nonneg"),
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.calculate_totals()

    def __repr__(self):
        return f"<Cart user_id={self.user_id!r} items={len(self.items)} total={self.total_amount}>"

    # totals

    def calculate_totals(self):
        self.total_amount = sum(
            (_to_money(line.price) * line.quantity for line in self.items),
            Decimal("0.00"),
        ).quantize(CENTS)
        self.total_items = sum(line.quantity for line in self.items)
        return self

    # mutations

    def _find_line(self, product_id):
        product_id = str(product_id)
        for line in self.items:
            if line.product_id == product_id:
                return line
        return None

    def add_product(self, product_id, name, price, image="", category=""):
        """Add one unit of a product.

        A product already in the cart only gets its quantity bumped; the
        name/price/image/category captured when the line was created are kept.
        """
        line = self._find_line(product_id)
        if line is not None:
            line.quantity += 1
        else:
            position = max((other.position for other in self.items), default=-1) + 1
            self.items.append(CartLine(
                product_id=str(product_id),
                name=name,
                price=_to_money(price),
                quantity=1,
                image=image or "",
                category=category or "",
                position=position,
            ))
        return self.calculate_totals()

    def remove_product(self, product_id):
        line = self._find_line(product_id)
        if line is not None:
            self.items.remove(line)
        return self.calculate_totals()

    def update_quantity(self, product_id, quantity):
        """Set a line's quantity exactly; zero or less removes the line."""
        quantity = int(quantity)
        if quantity <= 0:
            return self.remove_product(product_id)
        line = self._find_line(product_id)
        if line is not None:
            line.quantity = quantity
        return self.calculate_totals()

    def increase_quantity(self, product_id):
        line = self._find_line(product_id)
        if line is not None:
            line.quantity += 1
        return self.calculate_totals()

    def decrease_quantity(self, product_id):
        line = self._find_line(product_id)
        if line is not None:
            if line.quantity - 1 <= 0:
                return self.remove_product(product_id)
            line.quantity -= 1
        return self.calculate_totals()

    def clear_cart(self):
        self.items = []
        return self.calculate_totals()

    # read-only views

    def get_cart_items(self):
        return list(self.items)

    def is_empty(self) -> bool:
        return len(self.items) == 0

    def get_cart_summary(self) -> dict:
        return {
            "total_items": self.total_items,
            "total_amount": self.total_amount,
            "item_count": len(self.items),
            "is_empty": self.is_empty(),
        }

    @property
    def formatted_total(self) -> str:
        return f"${_to_money(self.total_amount or 0):.2f}"


class CartLine(Base):
    __tablename__ = "cart_lines"

    id = Column(Integer, primary_key=True, index=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(String(64), nullable=False)
    # catalog snapshot taken when the line was created
    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    image = Column(String(500), nullable=False, default="")
    category = Column(String(100), nullable=False, default="")
    quantity = Column(Integer, nullable=False, default=1)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    cart = relationship("Cart", back_populates="items")

    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", name="uq_cart_lines_cart_product"),
        CheckConstraint("quantity > 0", name="ck_cart_lines_quantity_pos"),
        CheckConstraint("price >= 0", name="ck_cart_lines_price_nonneg"),
        Index("ix_cart_lines_cart", "cart_id"),
    )

    def __repr__(self):
        return f"<CartLine product_id={self.product_id!r} quantity={self.quantity}>"


@event.listens_for(Session, "before_flush")
def _recalculate_cart_totals(session, flush_context, instances):
    """Recompute totals of every cart about to be flushed.

    Runs for all writes regardless of which code path mutated the lines.
    """
    candidates = list(session.new) + list(session.identity_map.values())
    seen = set()
    for obj in candidates:
        if not isinstance(obj, Cart) or id(obj) in seen or obj in session.deleted:
            continue
        seen.add(id(obj))
        # expired carts (e.g. after a rollback) would need IO to load their lines
        if "items" in inspect(obj).unloaded:
            continue
        obj.calculate_totals()
