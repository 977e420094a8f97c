"""Photo gallery browsing on top of storage listings."""

from .browser import (
    DOCUMENT_EXTENSIONS,
    GALLERY_RESOURCE_KEY,
    IMAGE_EXTENSIONS,
    GalleryBrowser,
    GalleryCard,
    GalleryPhoto,
    is_image_file,
    is_media_file,
)

__all__ = [
    "GalleryBrowser",
    "GalleryCard",
    "GalleryPhoto",
    "GALLERY_RESOURCE_KEY",
    "IMAGE_EXTENSIONS",
    "DOCUMENT_EXTENSIONS",
    "is_image_file",
    "is_media_file",
]
