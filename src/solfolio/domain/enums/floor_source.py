from enum import Enum


class FloorPriceSource(str, Enum):
    """Where NFT collection floor prices come from. Values match the settings string."""

    NONE = "none"
    STATIC = "static"
    MAGICEDEN = "magiceden"
