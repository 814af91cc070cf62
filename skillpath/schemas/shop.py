"""
Virtual economy schemas for SkillPath.

Defines Pydantic models for gem balances, the shop catalog, inventory rows,
active boosts and purchase results.
"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import datetime


class UserCurrency(BaseModel):
    """Invariant: gems == total_gems_earned - total_gems_spent >= 0."""
    user_id: str
    gems: int = Field(default=0, ge=0)
    total_gems_earned: int = Field(default=0, ge=0)
    total_gems_spent: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def balance_consistent(self):
        if self.gems != self.total_gems_earned - self.total_gems_spent:
            raise ValueError("gems must equal total_gems_earned - total_gems_spent")
        return self


class BoostInfo(BaseModel):
    multiplier: float = Field(..., gt=0)
    duration_minutes: int = Field(..., gt=0)


class ShopItem(BaseModel):
    id: str
    name: str
    description: str = ""
    item_type: str = "item"
    price_gems: int = Field(..., ge=0)
    max_inventory: Optional[int] = Field(default=None, ge=1)
    icon_emoji: str = ""
    sort_order: int = 0
    active: bool = True
    boost: Optional[BoostInfo] = None

    @property
    def is_boost(self) -> bool:
        return self.boost is not None


class InventoryItem(BaseModel):
    item: ShopItem
    quantity: int
    last_acquired_at: datetime


class ActiveBoost(BaseModel):
    item_id: str
    multiplier: float
    activated_at: datetime
    expires_at: datetime


class PurchaseResult(BaseModel):
    item_id: str
    new_balance: int
    quantity: int
    boost_expires_at: Optional[datetime] = None
