from typing import Literal

from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str
    required_sections: list[str]

class AuthRules(BaseModel):
    admin_role: str = "admin"
    role_header: str = "X-User-Role"
    cron_secret_env: str = "CRON_SECRET"
    require_cron_secret: bool = False

class RotaRules(BaseModel):
    default_window_days: int = Field(default=90, ge=1)
    cron_horizon_days: int = Field(default=30, ge=1)
    max_window_days: int = Field(default=366, ge=1)

class FormsRules(BaseModel):
    table: str = "newcomers"
    form_types: list[str]
    default_status: str = "New"
    default_lookup_field: str = "email"
    default_merge_strategy: Literal["merge", "replace", "insert_only"] = "merge"
    notes_separator: str = " | "

class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)

class Rules(BaseModel):
    project: ProjectRules
    auth: AuthRules
    rota: RotaRules
    forms: FormsRules
    ops: OpsRules
