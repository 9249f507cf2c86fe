"""
Media Service

Upload, upload-and-persist, delete and placeholder generation against the
media host. Each public operation is a single sequential call chain and
reports its outcome as an OperationResult; the private steps raise the
library's exceptions and the public boundary converts them.

Partial failure: when an upload succeeds but the record update fails, the
uploaded asset is NOT removed. The failure is logged with the orphaned
public id and returned to the caller, who owns any cleanup.
"""

import asyncio
import re
from typing import Any, Awaitable, Dict, Optional, Type

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from mediahost.core.config import Settings
from mediahost.core.exceptions import (
    DeletionFailedError,
    InvalidInputError,
    MediaHostError,
    MissingUrlError,
    RecordNotFoundError,
    RecordUpdateError,
    UploadFailedError,
)
from mediahost.core.logging import LogContext, get_logger, with_logging
from mediahost.core.metrics import record_record_update, set_app_info, track_operation_latency
from mediahost.core.results import OperationResult
from mediahost.engines.cloudinary.client import CloudinaryClient, MediaHostAPIError
from mediahost.engines.cloudinary.placeholder import placeholder_public_id, render_placeholder
from mediahost.engines.cloudinary.schemas import (
    Asset,
    DeletionResult,
    TransformationStep,
    UploadAndPersistResult,
    build_transformation,
)
from mediahost.modules.records.repositories import RecordStore

logger = get_logger(__name__)

# .../upload/[v<digits>/]<public id>.<extension>
PUBLIC_ID_PATTERN = re.compile(r"/upload/(?:v\d+/)?([^.]+)")
# .../<resource type>/upload/...
RESOURCE_TYPE_PATTERN = re.compile(r"/(image|video|raw)/upload/")

# "auto" lets the host detect the type; deletes need the concrete one
UPLOAD_RESOURCE_TYPES = ("image", "video", "raw", "auto")
DELETE_RESOURCE_TYPES = ("image", "video", "raw")

# Host error fragments that get a more helpful message
FRIENDLY_UPLOAD_ERRORS = {
    "File size too large": "File size exceeds media host limits. Maximum size is 100MB for videos and 20MB for images.",
    "Unsupported format": "Unsupported file format. Please use common image or video formats.",
}


def extract_public_id(url: Optional[str]) -> Optional[str]:
    """
    Recover the public id from a hosted asset URL.

    >>> extract_public_id("https://host/upload/v123/abc/def.webp")
    'abc/def'

    Returns None for URLs that do not follow the host's layout.
    """
    if not url:
        return None
    match = PUBLIC_ID_PATTERN.search(url)
    return match.group(1) if match else None


def infer_resource_type(url: Optional[str]) -> str:
    """Resource type segment of a hosted asset URL; 'image' when absent."""
    match = RESOURCE_TYPE_PATTERN.search(url or "")
    return match.group(1) if match else "image"


def describe_upload_error(message: str) -> str:
    for fragment, friendly in FRIENDLY_UPLOAD_ERRORS.items():
        if fragment in message:
            return friendly
    return message


class MediaService:
    """Media host operations bound to one Settings instance."""

    def __init__(
        self,
        settings: Settings,
        client: Optional[CloudinaryClient] = None,
        record_store: Optional[RecordStore] = None
    ):
        self.settings = settings
        self.client = client or CloudinaryClient(settings)
        self.record_store = record_store
        set_app_info(settings.APP_VERSION, settings.ENVIRONMENT)

    @property
    def upload_transformation(self) -> str:
        return build_transformation([
            TransformationStep(
                width=self.settings.UPLOAD_MAX_WIDTH,
                height=self.settings.UPLOAD_MAX_HEIGHT,
                crop="limit",
                quality="auto"
            ),
            TransformationStep(format=self.settings.UPLOAD_FORMAT),
        ])

    def _upload_options(self, resource_type: str) -> Dict[str, Any]:
        # Size bound and format conversion apply to images only
        if resource_type == "image":
            return {"transformation": self.upload_transformation}
        return {}

    @staticmethod
    async def _run(operation: str, step: Awaitable[Any]) -> OperationResult:
        try:
            value = await step
        except MediaHostError as e:
            return OperationResult.failure(operation, e)
        return OperationResult.success(operation, value)

    # =========================================================================
    # Public operations
    # =========================================================================

    async def upload(
        self,
        file_data: Optional[bytes],
        folder: Optional[str] = None,
        resource_type: str = "image"
    ) -> OperationResult[Asset]:
        """
        Upload media to the host.

        Images are bounded to the configured size and converted to the target
        format; video, raw and auto uploads are stored as sent.
        """
        folder = folder or self.settings.DEFAULT_UPLOAD_FOLDER
        return await self._run(
            "upload",
            self._upload_asset(
                file_data, folder, resource_type=resource_type, **self._upload_options(resource_type)
            )
        )

    async def upload_and_persist(
        self,
        file_data: Optional[bytes],
        record_type: Type[Any],
        record_id: Any,
        folder: Optional[str] = None,
        extra_fields: Optional[Dict[str, Any]] = None,
        url_field: Optional[str] = None,
        resource_type: str = "image"
    ) -> OperationResult[UploadAndPersistResult]:
        """
        Upload media and write its secure URL into a record.

        The URL goes into `url_field` (MEDIA_URL_FIELD by default) together
        with `extra_fields`; caller fields win on key collision.
        """
        return await self._run(
            "upload_and_persist",
            self._upload_and_persist(
                file_data,
                record_type,
                record_id,
                folder or self.settings.DEFAULT_UPLOAD_FOLDER,
                extra_fields or {},
                url_field or self.settings.MEDIA_URL_FIELD,
                resource_type
            )
        )

    async def delete(self, public_id: str, resource_type: str = "image") -> OperationResult[DeletionResult]:
        """Delete an asset; the host's acknowledgement is returned unchanged."""
        return await self._run("delete", self._delete(public_id, resource_type))

    async def delete_by_url(
        self,
        url: Optional[str],
        resource_type: Optional[str] = None
    ) -> OperationResult[Optional[DeletionResult]]:
        """
        Delete the asset behind a stored URL. URLs without a public id are a no-op.

        The resource type is read from the URL unless given explicitly.
        """
        public_id = extract_public_id(url)
        if public_id is None:
            logger.info("delete_by_url_skipped", url=url)
            return OperationResult.success("delete", None)
        return await self.delete(public_id, resource_type or infer_resource_type(url))

    async def generate_placeholder(self, title: str, folder: Optional[str] = None) -> OperationResult[str]:
        """Render and upload the default campaign image; returns its secure URL."""
        return await self._run(
            "generate_placeholder",
            self._generate_placeholder(title, folder or self.settings.PLACEHOLDER_FOLDER)
        )

    # =========================================================================
    # Steps
    # =========================================================================

    @with_logging("upload")
    async def _upload_asset(
        self,
        file_data: Optional[bytes],
        folder: str,
        filename: str = "upload",
        resource_type: str = "image",
        **options: Any
    ) -> Asset:
        if not file_data:
            raise InvalidInputError("Empty or invalid file buffer provided", details={"folder": folder})
        if resource_type not in UPLOAD_RESOURCE_TYPES:
            raise InvalidInputError(
                f"Unsupported resource type: {resource_type}",
                details={"folder": folder, "resource_type": resource_type}
            )

        logger.info("upload_started", size_bytes=len(file_data), folder=folder, resource_type=resource_type)

        try:
            with track_operation_latency("upload"):
                response = await self.client.upload(
                    file_data,
                    filename=filename,
                    resource_type=resource_type,
                    folder=folder,
                    **options
                )
        except MediaHostAPIError as e:
            raise UploadFailedError(
                f"Media host upload failed: {describe_upload_error(e.message)}",
                http_status=e.http_status,
                details={"folder": folder}
            ) from e

        if not response.get("public_id"):
            raise UploadFailedError(
                "Media host upload response has no public_id",
                details={"folder": folder}
            )

        try:
            asset = Asset.model_validate({"folder": folder, **response})
        except ValidationError as e:
            raise UploadFailedError(
                f"Media host upload response is malformed: {e.error_count()} invalid field(s)",
                details={"folder": folder, "public_id": response.get("public_id")}
            ) from e
        if not asset.secure_url:
            raise MissingUrlError(target_id=asset.public_id)

        logger.info(
            "upload_completed",
            public_id=asset.public_id,
            secure_url=asset.secure_url,
            format=asset.format
        )
        return asset

    @with_logging("upload_and_persist")
    async def _upload_and_persist(
        self,
        file_data: Optional[bytes],
        record_type: Type[Any],
        record_id: Any,
        folder: str,
        extra_fields: Dict[str, Any],
        url_field: str,
        resource_type: str = "image"
    ) -> UploadAndPersistResult:
        if self.record_store is None:
            raise InvalidInputError("No record store configured for upload_and_persist")

        record_name = record_type.__name__
        logger.info(
            "upload_and_persist_started",
            record_type=record_name,
            record_id=str(record_id),
            folder=folder
        )

        asset = await self._upload_asset(
            file_data, folder, resource_type=resource_type, **self._upload_options(resource_type)
        )
        secure_url = asset.secure_url
        fields = {url_field: secure_url, **extra_fields}

        with LogContext(target_id=str(record_id)):
            try:
                record = await self.record_store.find_and_update_by_id(
                    record_type, record_id, fields, validate=True
                )
            except (ValueError, SQLAlchemyError) as e:
                record_record_update(record_name, "error")
                logger.warning(
                    "record_update_failed_after_upload",
                    record_type=record_name,
                    public_id=asset.public_id,
                    error=str(e),
                    error_type=type(e).__name__
                )
                raise RecordUpdateError(
                    f"Failed to update {record_name} {record_id} with uploaded media: {e}",
                    record_type=record_name,
                    public_id=asset.public_id,
                    target_id=str(record_id)
                ) from e

            if record is None:
                record_record_update(record_name, "not_found")
                logger.warning(
                    "record_not_found_after_upload",
                    record_type=record_name,
                    public_id=asset.public_id
                )
                raise RecordNotFoundError(record_name, record_id, details={"public_id": asset.public_id})

            record_record_update(record_name, "success")
            logger.info("record_updated_with_media", record_type=record_name, url=secure_url)

        return UploadAndPersistResult(asset=asset, record=record, url=secure_url)

    @with_logging("delete")
    async def _delete(self, public_id: str, resource_type: str = "image") -> DeletionResult:
        if not public_id:
            raise InvalidInputError("A public id is required to delete an asset")
        if resource_type not in DELETE_RESOURCE_TYPES:
            raise InvalidInputError(
                f"Unsupported resource type: {resource_type}",
                target_id=public_id,
                details={"resource_type": resource_type}
            )

        with LogContext(target_id=public_id):
            try:
                with track_operation_latency("delete"):
                    response = await self.client.destroy(public_id, resource_type=resource_type)
            except MediaHostAPIError as e:
                raise DeletionFailedError(
                    f"Media host delete failed: {e.message}",
                    http_status=e.http_status
                ) from e

            result = DeletionResult(result=str(response.get("result", "")), raw=response)
            logger.info("delete_completed", result=result.result)
            return result

    @with_logging("generate_placeholder")
    async def _generate_placeholder(self, title: str, folder: str) -> str:
        if not isinstance(title, str) or not title.strip():
            raise InvalidInputError("A campaign title is required to generate a placeholder")

        public_id = placeholder_public_id(title)
        logger.info("placeholder_generation_started", public_id=public_id, folder=folder)

        image = await asyncio.to_thread(
            render_placeholder,
            title,
            (self.settings.PLACEHOLDER_WIDTH, self.settings.PLACEHOLDER_HEIGHT),
            self.settings.PLACEHOLDER_BACKGROUND,
            self.settings.PLACEHOLDER_TEXT_COLOR,
            self.settings.PLACEHOLDER_FONT_SIZE
        )

        asset = await self._upload_asset(
            image,
            folder,
            filename=f"{public_id}.png",
            public_id=public_id,
            format="png"
        )
        return asset.secure_url
