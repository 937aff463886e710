"""Database models for player gold and inventory."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, UniqueConstraint

from ..extensions import db


class User(db.Model):
    """A player holding a gold balance."""

    __table_args__ = (CheckConstraint("gold >= 0", name="ck_user_gold_non_negative"),)

    id: int = db.Column(db.Integer, primary_key=True)
    name: str = db.Column(db.String(80), unique=True, nullable=False)
    gold: int = db.Column(db.Integer, nullable=False, default=0)
    created_at: datetime = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at: datetime = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.name} gold={self.gold}>"


class InventoryRecord(db.Model):
    """One distinct item a user has ever bought, with the count currently held."""

    __tablename__ = "inventory_record"
    __table_args__ = (
        CheckConstraint("owned >= 0", name="ck_inventory_record_owned_non_negative"),
        UniqueConstraint("user_id", "item_name", name="uq_inventory_record_user_item"),
    )

    id: int = db.Column(db.Integer, primary_key=True)
    user_id: int = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    item_name: str = db.Column(db.String(120), nullable=False)
    item_index: Optional[str] = db.Column(db.String(120))
    owned: int = db.Column(db.Integer, nullable=False, default=0)
    created_at: datetime = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at: datetime = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    user = db.relationship("User", backref="inventory")

    def serialize(self) -> dict[str, object]:
        """Return the record as consumed by the store client."""
        return {"name": self.item_name, "index": self.item_index, "owned": self.owned}
