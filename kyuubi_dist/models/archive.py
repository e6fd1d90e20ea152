"""Archive naming data model."""

from pydantic import BaseModel, ConfigDict, Field


class ArchiveSpec(BaseModel):
    """Names of the staging directory and the compressed archive."""

    model_config = ConfigDict(frozen=True)

    staging_dir_name: str = Field(description="Top-level directory inside the archive")
    output_file_name: str = Field(description="File name of the compressed archive")
