from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

NOT_APPLICABLE = "NA"  # component slot unused in this combination

ARTIFACT_NOT_FOUND = "NOT_FOUND"
ARTIFACT_ERROR = "ERROR"


class QueryCriteria(BaseModel):
    """Optional filters from the request body. Empty or missing means unconstrained."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        str_strip_whitespace=True,
    )

    spindle: str | None = None
    length: str | None = None  # "<=120", "50-100", ">30" or "75"
    holder_angle: str | None = Field(default=None, alias="holderAngle")
    extension_angle: str | None = Field(default=None, alias="extensionAngle")
    tool_type: str | None = Field(default=None, alias="toolType")
    thread: str | None = None
    bore_diameter: str | None = Field(default=None, alias="boreDiameter")
    edge_radius: str | None = Field(default=None, alias="edgeRadius")
    cutting_diameter: str | None = Field(default=None, alias="cuttingDiameter")


class CombinationRecord(BaseModel):
    """One row of the combinations table. Unknown attributes are kept as-is."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", coerce_numbers_to_str=True)

    id: str | int | None = None
    spindle: str
    master_holder: str = Field(alias="productSKUMasterHolder")
    extension_adapter: str = Field(default=NOT_APPLICABLE, alias="productSKUExtensionAdapter")
    clamping_extension: str = Field(alias="productSKUClampingExtension")
    length: int | float | None = None
    holder_angle: str | None = Field(default=None, alias="holderAngle")
    extension_angle: str | None = Field(default=None, alias="extensionAngle")
    tool_type: str | None = Field(default=None, alias="toolType")
    thread: str | None = None
    bore_diameter: str | None = Field(default=None, alias="boreDiameter")
    edge_radius: str | None = Field(default=None, alias="edgeRadius")
    cutting_diameter: str | None = Field(default=None, alias="cuttingDiameter")


class ArtifactAccess(BaseModel):
    """Outcome of resolving one artifact key."""

    model_config = ConfigDict(frozen=True)

    status: Literal["available", "not_found", "error"]
    url: str | None = None
    error: str | None = None

    @classmethod
    def available(cls, url: str) -> ArtifactAccess:
        return cls(status="available", url=url)

    @classmethod
    def not_found(cls) -> ArtifactAccess:
        return cls(status="not_found")

    @classmethod
    def failed(cls, message: str) -> ArtifactAccess:
        return cls(status="error", error=message)

    @property
    def link(self) -> str:
        """The value exposed to clients: URL, NOT_FOUND or ERROR."""
        if self.status == "available":
            return self.url
        if self.status == "not_found":
            return ARTIFACT_NOT_FOUND
        return ARTIFACT_ERROR


class RecordArtifacts(BaseModel):
    stl: ArtifactAccess
    step: ArtifactAccess

    @property
    def error(self) -> str | None:
        errors = [a.error for a in (self.stl, self.step) if a.status == "error"]
        return "; ".join(errors) if errors else None


class ProductHandles(BaseModel):
    master_holder: str | None = Field(default=None, alias="productHandleMasterHolder")
    extension_adapter: str | None = Field(default=None, alias="productHandleExtensionAdapter")
    clamping_extension: str | None = Field(default=None, alias="productHandleClampingExtension")

    model_config = ConfigDict(populate_by_name=True)


class CombinationResult(CombinationRecord):
    """A matched combination with its 3D file links.

    Product handles, when looked up, travel as extra fields.
    """

    stl_file_path: str = Field(alias="stlFilePath")
    step_file_path: str = Field(alias="stepFilePath")
    artifact_error: str | None = Field(default=None, alias="artifactError")


class EmptyResult(BaseModel):
    message: str = "No items found matching the criteria."
