# SQLAlchemy models
from .base import Base
from .statistics import ItemStatisticRecord, SchemaVersion

__all__ = [
    # Base
    "Base",
    # Statistics
    "ItemStatisticRecord",
    "SchemaVersion",
]
