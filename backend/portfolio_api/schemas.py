"""Pydantic response models for the portfolio API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class FileUploadResult(BaseModel):
    file_name: str
    file_type: str
    label: str | None = None
    status: str
    record_count: int = 0
    error: str | None = None


class UploadResponse(BaseModel):
    files: list[FileUploadResult] = Field(default_factory=list)
    customer_count: int | None = None


class RebuildResponse(BaseModel):
    customer_count: int


class UploadLogItem(BaseModel):
    id: int | None = None
    file_type: str
    file_name: str
    record_count: int = 0
    status: str
    error_message: str | None = None
    timestamp: str


class UploadLogResponse(BaseModel):
    entries: list[UploadLogItem] = Field(default_factory=list)


class StatusResponse(BaseModel):
    counts: dict[str, int] = Field(default_factory=dict)
    has_data: bool = False
    last_processed: dict[str, str | None] = Field(default_factory=dict)


class Customer360Response(BaseModel):
    customer: dict[str, Any]
    deposits: list[dict[str, Any]] = Field(default_factory=list)
    loans: list[dict[str, Any]] = Field(default_factory=list)
    ccod: list[dict[str, Any]] = Field(default_factory=list)


class TablePageResponse(BaseModel):
    table: str
    page: int
    page_size: int
    total: int
    records: list[dict[str, Any]] = Field(default_factory=list)
