"""
mediahost

Upload images to Cloudinary, patch records with the resulting URL,
delete hosted assets and generate default campaign images.
"""

from mediahost.core.config import Settings, load_settings
from mediahost.core.exceptions import (
    MediaHostError,
    InvalidInputError,
    UploadFailedError,
    DeletionFailedError,
    MissingUrlError,
    RecordNotFoundError,
    RecordUpdateError,
)
from mediahost.core.results import OperationResult
from mediahost.engines.cloudinary.client import CloudinaryClient
from mediahost.engines.cloudinary.schemas import Asset, DeletionResult, UploadAndPersistResult
from mediahost.engines.cloudinary.services import MediaService, extract_public_id, infer_resource_type

__version__ = "1.0.0"

__all__ = [
    "Settings",
    "load_settings",
    "MediaHostError",
    "InvalidInputError",
    "UploadFailedError",
    "DeletionFailedError",
    "MissingUrlError",
    "RecordNotFoundError",
    "RecordUpdateError",
    "OperationResult",
    "CloudinaryClient",
    "Asset",
    "DeletionResult",
    "UploadAndPersistResult",
    "MediaService",
    "extract_public_id",
    "infer_resource_type",
]
