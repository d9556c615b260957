"""
AI image generation package for Tale Weaver.
"""

from .image_service import (
    DecodedImage,
    IllustrationGenerator,
    build_storage_key,
    decode_image_data_url,
    extract_image_data_url,
)
from .prompting import build_illustration_prompt
from .storage import BlobStore, LocalBlobStore, S3BlobStore, build_blob_store

__all__ = [
    "build_illustration_prompt",
    "IllustrationGenerator",
    "DecodedImage",
    "build_storage_key",
    "decode_image_data_url",
    "extract_image_data_url",
    "BlobStore",
    "LocalBlobStore",
    "S3BlobStore",
    "build_blob_store",
]
