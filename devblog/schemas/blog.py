from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator


def _single_line(value: str) -> str:
    if value.splitlines() not in ([], [value]):
        raise ValueError("must be a single line")
    return value


class Post(BaseModel):
    title: str
    slug: str
    date: str
    content: str
    excerpt: str
    sha: str  # blob sha of the backing file, required for updates
    path: Optional[str] = None
    metadata: Dict[str, str] = Field(default_factory=dict)


class PostDraft(BaseModel):
    title: str = Field(..., min_length=1)
    content: str = ""
    date: Optional[str] = None  # defaults to the day of the write
    # Set both when editing an existing post
    slug: Optional[str] = None
    sha: Optional[str] = None
    # Extra frontmatter fields; left empty on edit, the stored ones are kept
    metadata: Dict[str, str] = Field(default_factory=dict)

    @field_validator("title", "date")
    @classmethod
    def header_values_are_single_line(cls, value: Optional[str]) -> Optional[str]:
        return value if value is None else _single_line(value)

    @field_validator("metadata")
    @classmethod
    def metadata_is_flat(cls, value: Dict[str, str]) -> Dict[str, str]:
        for key, item in value.items():
            if not key.strip() or ":" in key or key != key.strip():
                raise ValueError(f"invalid frontmatter key {key!r}")
            _single_line(key)
            _single_line(item)
        return value


class ImageUpload(BaseModel):
    content_type: str = "image/png"
    data: str  # base64 encoded image bytes
    name: Optional[str] = None


class ImageUploadResponse(BaseModel):
    path: str
    markdown: str


class FolderRequest(BaseModel):
    name: str = Field(..., min_length=1)
