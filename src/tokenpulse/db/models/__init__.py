from tokenpulse.db.models.price import PriceBucket
from tokenpulse.db.models.swap import SwapRecord
from tokenpulse.db.models.token import Token
from tokenpulse.db.models.volume import VolumeBucket

__all__ = [
    "PriceBucket",
    "SwapRecord",
    "Token",
    "VolumeBucket",
]
