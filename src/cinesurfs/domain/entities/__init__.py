from .streams import (
    AUTO_QUALITY,
    EMBED_QUALITY_PREFIX,
    EmbedTarget,
    QualityVariant,
    ResolutionRequest,
)

__all__ = [
    "AUTO_QUALITY",
    "EMBED_QUALITY_PREFIX",
    "EmbedTarget",
    "QualityVariant",
    "ResolutionRequest",
]
