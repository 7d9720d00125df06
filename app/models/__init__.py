from .base import Base
from .admin import Admin, AdminRole
from .farmer import Farmer, FarmerStatus
from .stock import StockItem
from .feed_request import FeedRequest, RequestStatus
from .feed_history import FeedHistoryEntry

__all__ = [
    "Base",
    "Admin",
    "AdminRole",
    "Farmer",
    "FarmerStatus",
    "StockItem",
    "FeedRequest",
    "RequestStatus",
    "FeedHistoryEntry",
]
