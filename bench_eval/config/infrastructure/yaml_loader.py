"""YAML config loader: parses, interpolates env vars, validates, and emits observer events."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from bench_eval.config.domain.config import EvalConfig
from bench_eval.config.domain.observer import ConfigObserver
from bench_eval.config.infrastructure.env_interpolation import (
    collect_missing_vars,
    interpolate,
)
from bench_eval.config.infrastructure.errors import (
    ConfigLoadError,
    ConfigValidationError,
    MissingEnvVarsError,
)
from bench_eval.rubric.domain.rubric import LlmRubric


class YamlConfigLoader:
    """Loads, interpolates, validates, and returns an EvalConfig from a YAML file."""

    def __init__(self, observer: ConfigObserver) -> None:
        self._observer = observer

    def load(self, path: Path) -> EvalConfig:
        """
        Load, interpolate, validate, and return an EvalConfig from a YAML file.

        A relative ``dataset.path`` is resolved against the config file's directory.

        Raises:
            ConfigLoadError: if the file is missing or is not valid YAML.
            MissingEnvVarsError: if any ${ENV_VAR} references are unset (all collected first).
            ConfigValidationError: if the schema is violated, or an llm_rubric
                names no model and there is no judge section.
        """
        raw = _parse_yaml(path=path)
        _check_missing_env_vars(raw=raw)
        interpolated = interpolate(raw)
        cfg = _build_config(resolved=interpolated)
        _check_judge_models(cfg=cfg)
        cfg = _resolve_dataset_path(cfg=cfg, base_dir=path.parent)
        _emit_warnings(cfg=cfg, observer=self._observer)
        self._observer.config_loaded(name=cfg.name, rubric_count=len(cfg.rubrics))
        return cfg


def _parse_yaml(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as fh:
            return yaml.safe_load(fh)
    except FileNotFoundError as exc:
        raise ConfigLoadError(path) from exc
    except yaml.YAMLError as exc:
        raise ConfigLoadError(path, reason=f"invalid YAML ({exc})") from exc


def _check_missing_env_vars(raw: Any) -> None:
    """Raise MissingEnvVarsError if any ${ENV_VAR} references in raw are unset."""
    missing = collect_missing_vars(raw)
    if missing:
        raise MissingEnvVarsError(missing)


def _build_config(resolved: Any) -> EvalConfig:
    if not isinstance(resolved, dict):
        raise ConfigValidationError("top level must be a mapping")
    try:
        return EvalConfig.model_validate(resolved)
    except ValidationError as exc:
        raise ConfigValidationError(str(exc)) from exc


def _check_judge_models(cfg: EvalConfig) -> None:
    """Every llm_rubric needs a model of its own or a judge section to fall back on.

    Raises:
        ConfigValidationError: listing ALL offending rubrics, not just the first.
    """
    if cfg.judge is not None:
        return
    orphans = [
        rubric.id or f"rubrics[{index}]"
        for index, rubric in enumerate(cfg.rubrics)
        if isinstance(rubric, LlmRubric) and rubric.model is None
    ]
    if orphans:
        raise ConfigValidationError(
            "llm_rubric without a model requires a judge section: "
            + ", ".join(orphans)
        )


def _resolve_dataset_path(cfg: EvalConfig, base_dir: Path) -> EvalConfig:
    if cfg.dataset.path.is_absolute():
        return cfg
    dataset = cfg.dataset.model_copy(update={"path": base_dir / cfg.dataset.path})
    return cfg.model_copy(update={"dataset": dataset})


def _emit_warnings(cfg: EvalConfig, observer: ConfigObserver) -> None:
    if cfg.judge is not None and cfg.judge.temperature > 0.0:
        observer.config_judge_temperature_warning(cfg.judge.temperature)
