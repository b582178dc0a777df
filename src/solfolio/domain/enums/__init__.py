from solfolio.domain.enums.asset import AccountKind
from solfolio.domain.enums.floor_source import FloorPriceSource

__all__ = [
    "AccountKind",
    "FloorPriceSource",
]
