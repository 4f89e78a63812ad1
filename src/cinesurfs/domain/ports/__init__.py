from .embed_sources import EmbedSourcesPort
from .stream_resolver import StreamResolverPort

__all__ = ["EmbedSourcesPort", "StreamResolverPort"]
