import hmac
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from congregation.adapters.clock import SystemClock
from congregation.adapters.locks import InProcessLocks
from congregation.adapters.sqlite.repos import (
    SQLiteFormConfigRepo,
    SQLitePatternRepo,
    SQLiteRecordStore,
    SQLiteServiceRepo,
    SQLiteTemplateRepo,
)
from congregation.components.forms import (
    FormConfigSourcePort,
    PipelineConfig,
    RecordStorePort,
)
from congregation.components.forms import LockPort as FormLockPort
from congregation.components.service_generation import (
    ClockPort,
    GenerationConfig,
    LockPort,
    PatternRepoPort,
    ServiceRepoPort,
    TemplateRepoPort,
)
from congregation.rules.loader import generation_config, load_rules, pipeline_config
from congregation.rules.models import Rules

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.environ.get("CONGREGATION_BASE_DIR", PROJECT_ROOT))
        self.data_dir = Path(os.environ.get("CONGREGATION_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "congregation.db")
        self.rules_path = self.base_dir / "rules.yaml"
        self.migrations_dir = str(self.base_dir / "migrations")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


@lru_cache
def get_locks() -> InProcessLocks:
    return InProcessLocks()


# --- Port bundles ---
@dataclass
class RotaPorts:
    services: ServiceRepoPort
    patterns: PatternRepoPort
    templates: TemplateRepoPort
    clock: ClockPort | None
    locks: LockPort | None
    config: GenerationConfig


@dataclass
class FormPorts:
    source: FormConfigSourcePort
    store: RecordStorePort
    locks: FormLockPort | None
    config: PipelineConfig
    form_types: list[str]


def get_rota_ports(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> RotaPorts:
    return RotaPorts(
        services=SQLiteServiceRepo(settings.db_path),
        patterns=SQLitePatternRepo(settings.db_path),
        templates=SQLiteTemplateRepo(settings.db_path),
        clock=SystemClock(),
        locks=get_locks(),
        config=generation_config(rules),
    )


def get_form_ports(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> FormPorts:
    return FormPorts(
        source=SQLiteFormConfigRepo(settings.db_path),
        store=SQLiteRecordStore(settings.db_path),
        locks=get_locks(),
        config=pipeline_config(rules),
        form_types=list(rules.forms.form_types),
    )


# --- Access checks ---
def require_admin(request: Request, rules: Rules = Depends(get_rules)) -> str:
    """
    Role string check for admin routes.

    The role is resolved upstream by the auth provider and forwarded in a
    header; this only compares it.
    """
    role = request.headers.get(rules.auth.role_header)
    if not role:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    if role != rules.auth.admin_role:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden. Admin access required.",
        )
    return role


def verify_cron_secret(
    authorization: Annotated[str | None, Header()] = None,
    rules: Rules = Depends(get_rules),
) -> None:
    """Require "Bearer <secret>" when a cron secret is configured."""
    secret = os.environ.get(rules.auth.cron_secret_env)
    if not secret:
        if rules.auth.require_cron_secret:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
        return
    if not authorization or not hmac.compare_digest(authorization, f"Bearer {secret}"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
