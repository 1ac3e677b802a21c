from .base import BaseModel
from .users import User, UserRole
from .deals import Deal, DealCategory, DiscountType
from .claims import Claim, ClaimStatus

__all__ = ["BaseModel", "User", "UserRole", "Deal", "DealCategory", "DiscountType", "Claim", "ClaimStatus"]
