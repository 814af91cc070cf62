"""
Error taxonomy for SkillPath.

Expected states (locked node, wrong answer, duplicate completion) are modelled
as values. These exceptions cover the cases a caller has to handle.
"""


class SkillPathError(Exception):
    """Base class for all SkillPath errors."""


class NotAuthenticated(SkillPathError):
    """No current user; mutating operations refuse to run."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class NotFound(SkillPathError):
    """Referenced topic, lesson, node or shop item does not exist."""

    def __init__(self, kind: str, ref: str):
        self.kind = kind
        self.ref = ref
        super().__init__(f"{kind} not found: {ref}")


class AlreadyCompleted(SkillPathError):
    """Duplicate completion attempt (benign, normally reported as a status)."""


class InsufficientFunds(SkillPathError):
    """Item price exceeds the user's gem balance. Nothing was changed."""

    def __init__(self, item_id: str, price: int, balance: int):
        self.item_id = item_id
        self.price = price
        self.balance = balance
        super().__init__(
            f"Insufficient gems for {item_id}: price {price}, balance {balance}"
        )


class InventoryLimitReached(SkillPathError):
    """User already holds the maximum allowed quantity of an item."""

    def __init__(self, item_id: str, max_inventory: int):
        self.item_id = item_id
        self.max_inventory = max_inventory
        super().__init__(f"Inventory limit reached for {item_id} (max {max_inventory})")


class StorageError(SkillPathError):
    """Underlying storage failed; the transaction was rolled back."""


class ValidationError(SkillPathError):
    """Malformed input or content (e.g. unknown question type)."""
