from datetime import date
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel


# --- Rota ---
class GenerateServicesRequest(BaseModel):
    template_id: UUID
    pattern_id: UUID | None = None
    start_date: date | None = None
    end_date: date | None = None


class ServiceResponse(BaseModel):
    id: UUID
    date: str
    name: str
    time: str | None = None


class GenerateServicesResponse(BaseModel):
    success: bool = True
    services: list[ServiceResponse] = []
    skipped: list[ServiceResponse] = []
    message: str


class PatternRunResponse(BaseModel):
    pattern_id: UUID
    pattern_name: str
    generated: int
    error: str | None = None


class GenerateDueResponse(BaseModel):
    success: bool = True
    message: str
    total_generated: int = 0
    results: list[PatternRunResponse] = []


# --- Forms ---
class FormConfigResponse(BaseModel):
    id: str
    form_type: str
    name: str
    version: int
    status: str


class FormResponse(BaseModel):
    config: FormConfigResponse
    fields: list[dict[str, Any]]
    sections: dict[str, list[str]]
    static_content: dict[str, str]


class SubmitFormResponse(BaseModel):
    success: bool = True
    status: Literal["created", "updated"]
    record_id: str
    is_new_record: bool
