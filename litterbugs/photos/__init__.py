"""
Litterbugs - Photo Module
Upload and display resolution of report photos.
"""

from litterbugs.photos.pipeline import (
    PhotoPipeline,
    ResolutionTracker,
    build_photo_path,
    content_type_for,
    photo_extension,
    read_local_photo,
)

__all__ = [
    "PhotoPipeline",
    "ResolutionTracker",
    "build_photo_path",
    "content_type_for",
    "photo_extension",
    "read_local_photo",
]
