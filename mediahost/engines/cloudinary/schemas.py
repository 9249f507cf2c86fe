from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


class TransformationStep(BaseModel):
    """One chained Cloudinary transformation, e.g. w_1200,h_630,c_limit."""
    width: Optional[int] = None
    height: Optional[int] = None
    crop: Optional[str] = None
    quality: Optional[str] = None
    format: Optional[str] = None
    background: Optional[str] = None

    def to_param(self) -> str:
        parts = []
        if self.width is not None:
            parts.append(f"w_{self.width}")
        if self.height is not None:
            parts.append(f"h_{self.height}")
        if self.crop:
            parts.append(f"c_{self.crop}")
        if self.quality:
            parts.append(f"q_{self.quality}")
        if self.background:
            parts.append(f"b_{self.background}")
        if self.format:
            parts.append(f"f_{self.format}")
        return ",".join(parts)


def build_transformation(steps: List[TransformationStep]) -> str:
    """Chain transformation steps with '/' as Cloudinary expects."""
    return "/".join(step.to_param() for step in steps if step.to_param())


class Asset(BaseModel):
    """Descriptor of an uploaded asset as returned by the host."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    public_id: str
    secure_url: Optional[str] = None
    folder: Optional[str] = None
    format: Optional[str] = None
    resource_type: Optional[str] = None
    version: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    size_bytes: Optional[int] = Field(None, alias="bytes")


class DeletionResult(BaseModel):
    """Host acknowledgement of a destroy call, passed through as-is."""
    model_config = ConfigDict(extra="allow")

    result: str
    raw: Dict[str, Any] = Field(default_factory=dict)

    @property
    def deleted(self) -> bool:
        return self.result == "ok"


class UploadAndPersistResult(BaseModel):
    """Uploaded asset plus the record that now points at it."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    asset: Asset
    record: Any
    url: str
