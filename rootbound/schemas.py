from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import Outcome


class FileEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    path: str
    relative_path: str
    size: int


class MountPointOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    path: str
    label: str
    total_bytes: Optional[int] = None
    free_bytes: Optional[int] = None


class RenameRequest(BaseModel):
    root: str = Field(min_length=1)
    relative_path: str
    new_name: str = Field(min_length=1, max_length=255)


class DeleteRequest(BaseModel):
    root: str = Field(min_length=1)
    relative_path: str


class MoveRequest(BaseModel):
    root: str = Field(min_length=1)
    from_relative: str
    to_relative_dir: str = ''
    create_dir: bool = False


class CreateFolderRequest(BaseModel):
    root: str = Field(min_length=1)
    relative_dir: str


class OperationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    outcome: Outcome
    created: list[str] = Field(default_factory=list)


class ApiResponse(BaseModel):
    ok: bool
    message: str
    data: Optional[Any] = None
