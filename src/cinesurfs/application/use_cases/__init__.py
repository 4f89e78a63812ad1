from .video_links import VideoLinksUseCase

__all__ = ["VideoLinksUseCase"]
