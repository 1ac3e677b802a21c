from .common import CamelModel, Pagination
from .auth import (
    AuthPayload,
    LoginRequest,
    ProfilePayload,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
    UserPublic,
)
from .deals import (
    CategoryCount,
    DealCreate,
    DealFilter,
    DealListPayload,
    DealPayload,
    DealRead,
    DealSort,
    DealsPayload,
)
from .claims import ClaimCreate, ClaimListPayload, ClaimPayload, ClaimRead, ClaimStats
