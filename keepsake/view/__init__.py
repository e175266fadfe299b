"""View models for presenting the gallery."""

from .gallery import format_file_size, format_upload_date, Gallery, GalleryView, VideoCard

__all__ = ["format_file_size", "format_upload_date", "Gallery", "GalleryView", "VideoCard"]
