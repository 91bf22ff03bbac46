"""Pydantic schemas for the files feature."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FileUploadResponse(BaseModel):
    """Returned after a successful upload."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "file_url": "http://localhost:9000/chatbot-files/report.pdf",
                "file_name": "report.pdf",
            }
        },
    )

    file_url: str = Field(..., description="Public URL of the stored object")
    file_name: str = Field(..., description="Key the file was stored under")
