from pathlib import Path

import yaml
from pydantic import ValidationError

from congregation.components.forms import PipelineConfig
from congregation.components.service_generation import GenerationConfig
from congregation.rules.models import Rules


def _strip_fences(content: str) -> str:
    """Use the first ```yaml block if there is one, else the whole file."""
    yaml_lines = []
    in_block = False
    found_block = False

    for line in content.splitlines():
        s_line = line.strip()
        if s_line.startswith("```yaml"):
            in_block = True
            found_block = True
            continue
        if in_block and s_line.startswith("```"):
            break
        if in_block:
            yaml_lines.append(line)

    return "\n".join(yaml_lines) if found_block else content


def load_rules(path: Path) -> Rules:
    """
    Load and validate the rules file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if YAML or schema invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    with open(path) as f:
        content = f.read()

    try:
        data = yaml.safe_load(_strip_fences(content))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    try:
        rules = Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e

    missing = [s for s in rules.project.required_sections if s not in (data or {})]
    if missing:
        raise ValueError(f"Rules file missing required sections: {', '.join(missing)}")
    return rules


def generation_config(rules: Rules) -> GenerationConfig:
    return GenerationConfig(
        default_window_days=rules.rota.default_window_days,
        cron_horizon_days=rules.rota.cron_horizon_days,
        max_window_days=rules.rota.max_window_days,
    )


def pipeline_config(rules: Rules) -> PipelineConfig:
    return PipelineConfig(
        table=rules.forms.table,
        default_status=rules.forms.default_status,
        default_lookup_field=rules.forms.default_lookup_field,
        default_merge_strategy=rules.forms.default_merge_strategy,
        notes_separator=rules.forms.notes_separator,
    )
