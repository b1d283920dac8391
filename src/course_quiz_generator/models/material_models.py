"""
Pydantic models for course materials flowing through extraction and chunking.
"""
from typing import Optional
from pydantic import BaseModel, Field


class Material(BaseModel):
    """Reference to one source document owned by the course-content store."""
    material_id: str = Field(description="Identifier of the material record")
    title: str = Field(description="Display title of the material")
    content_type: str = Field(
        description="Content type, e.g. 'pdf', 'notes', 'video' or 'assignment'")
    file_ref: Optional[str] = Field(
        default=None,
        description="Blob reference, uploads-relative path or absolute path")


class ExtractedText(BaseModel):
    """Cleaned text extracted from one material."""
    source_title: str
    text: str
    source_material_id: Optional[str] = None


class Chunk(BaseModel):
    """A paragraph-aligned slice of text sized for one generation call."""
    chunk_id: int = Field(ge=1)
    source_title: str = "unknown"
    text: str
    word_count: int = Field(ge=0)


class ExtractionReport(BaseModel):
    """Outcome of extracting one file in a batch."""
    file_path: str
    file_name: str
    text: str = ""
    word_count: int = 0
    success: bool
    error: Optional[str] = None
