"""
Request models for the memory tools.
Their JSON schemas double as the tool input schemas.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.config import SEARCH_DEFAULT_LIMIT, SEARCH_DEFAULT_THRESHOLD
from ..core.schema import BIO_FIELDS, FieldUpdate

BioField = Literal["nombre", "ocupacion", "ubicacion", "tecnologias", "herramientas", "idiomas", "timezone", "mascotas"]


def _not_blank(name: str, v: str) -> str:
    if not v.strip():
        raise ValueError(f'{name} cannot be empty')
    return v


class SaveMemoryRequest(BaseModel):
    id: str = Field(description="Unique identifier for this memory")
    text: str = Field(description="The text content to save in memory")
    metadata: Optional[Dict[str, Any]] = Field(
        default=None, description="Optional metadata (tags, category, etc.)"
    )

    @field_validator('id')
    @classmethod
    def id_must_not_be_empty(cls, v):
        return _not_blank('id', v)

    @field_validator('text')
    @classmethod
    def text_must_not_be_empty(cls, v):
        return _not_blank('text', v)


class SearchMemoryRequest(BaseModel):
    query: str = Field(description="The search query text")
    n_results: float = Field(
        default=SEARCH_DEFAULT_LIMIT,
        description=f"Number of results to return (default: {SEARCH_DEFAULT_LIMIT})",
    )
    threshold: float = Field(
        default=SEARCH_DEFAULT_THRESHOLD,
        description=f"Minimum similarity score (0-1, default: {SEARCH_DEFAULT_THRESHOLD})",
    )

    @field_validator('query')
    @classmethod
    def query_must_not_be_empty(cls, v):
        return _not_blank('query', v)


class MemoryIdRequest(BaseModel):
    id: str = Field(description="The ID of the memory")

    @field_validator('id')
    @classmethod
    def id_must_not_be_empty(cls, v):
        return _not_blank('id', v)


class EmptyRequest(BaseModel):
    pass


class SetUserBioRequest(BaseModel):
    """All fields optional. Omitted fields keep their value; null clears them."""

    model_config = ConfigDict(extra="forbid")

    nombre: Optional[str] = Field(default=None, description="User's name or nickname")
    ocupacion: Optional[str] = Field(default=None, description="User's occupation or role")
    ubicacion: Optional[str] = Field(
        default=None, description="User's location (city/country, not full address)"
    )
    tecnologias: Optional[List[str]] = Field(
        default=None, description="Main technologies the user works with"
    )
    herramientas: Optional[List[str]] = Field(
        default=None, description="Tools and software the user uses"
    )
    idiomas: Optional[List[str]] = Field(default=None, description="Languages the user speaks")
    timezone: Optional[str] = Field(
        default=None, description="User's timezone (e.g., America/Santiago)"
    )
    mascotas: Optional[List[str]] = Field(
        default=None, description="User's pets (e.g., 'Mia (gata)')"
    )

    def to_updates(self) -> Dict[str, FieldUpdate]:
        provided = self.model_dump(include=self.model_fields_set)
        return {name: FieldUpdate.from_argument(provided, name) for name in BIO_FIELDS}


class UpdateUserBioRequest(BaseModel):
    field: BioField = Field(description="The field to update")
    value: Any = Field(
        description="The new value for the field (string for text fields, array for list fields)"
    )
