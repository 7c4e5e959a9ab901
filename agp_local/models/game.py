"""
Pydantic models for remote game packages and their local installations.
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class PackageDescriptor(BaseModel):
    """
    Describes a package published on the remote service.

    Accepts both the server's camelCase payload keys and snake_case names.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: int = Field(validation_alias=AliasChoices("id", "Id"))
    name: str = Field("", validation_alias=AliasChoices("name", "Name"))
    version: str = Field("", validation_alias=AliasChoices("version", "Version"))
    size_bytes: int = Field(
        0, validation_alias=AliasChoices("size_bytes", "sizeBytes", "SizeBytes")
    )
    download_url: str = Field(
        "", validation_alias=AliasChoices("download_url", "downloadUrl", "DownloadUrl")
    )

    # Catalog details, informational only
    description: str = Field(
        "", validation_alias=AliasChoices("description", "Description")
    )
    author: str = Field("", validation_alias=AliasChoices("author", "Author"))
    thumbnail_url: str = Field(
        "",
        validation_alias=AliasChoices("thumbnail_url", "thumbnailUrl", "ThumbnailUrl"),
    )
    published_at: datetime | None = Field(
        None,
        validation_alias=AliasChoices(
            "published_at", "publishedDate", "PublishedDate"
        ),
    )
    tags: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("tags", "Tags")
    )


class InstallationRecord(BaseModel):
    """A fully populated record of a locally installed package."""

    model_config = ConfigDict(frozen=True)

    package_id: int
    name: str
    version: str
    install_path: str
    entrypoint_path: str = ""
    installed_at: datetime

    @property
    def has_entrypoint(self) -> bool:
        return bool(self.entrypoint_path)
