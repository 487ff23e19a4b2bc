# maonamassa/schemas/contract.py
from typing import Any, Literal, get_args

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from sqlmodel import SQLModel

ContractStatus = Literal["criado", "aceito", "em_andamento", "concluido", "cancelado"]

# Enumeration order is part of the API (reported back on errors)
VALID_STATUS: list[str] = list(get_args(ContractStatus))


class StatusUpdate(SQLModel):
    """
    Payload for PUT /contracts/{id}/status.

    `status` is validated by the lifecycle service, not here, so that an
    unknown value yields InvalidStatus with the list of valid values.
    """

    model_config = ConfigDict(extra="ignore")

    status: Any = None


class RatingSubmit(BaseModel):
    """
    Payload for PUT /contracts/{id}/avaliar.

    Legacy clients send `nota` / `comentario`; both spellings are accepted.
    """

    model_config = ConfigDict(extra="ignore")

    rating: Any = Field(
        default=None,
        validation_alias=AliasChoices("rating", "nota"),
    )
    comment: str | None = Field(
        default=None,
        validation_alias=AliasChoices("comment", "comentario"),
    )

    @field_validator("comment", mode="before")
    @classmethod
    def comment_as_text(cls, v):
        # Free text; numbers and the like are kept as their string form
        if v is None or isinstance(v, str):
            return v
        return str(v)


class StatusChanged(SQLModel):
    message: str
    status: str
    timestamp: str


class RatingRecorded(SQLModel):
    message: str
    rating: Any
    comment: str | None
    timestamp: str
