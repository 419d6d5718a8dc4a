"""Run configuration for the fraud report."""

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .exceptions import ConfigError


BALANCE_METHODS = ('rose', 'smote')


@dataclass(frozen=True)
class ReportConfig:
    """
    Every knob a report run reads.

    Stages receive this object explicitly; nothing relies on global
    random state.
    """

    data_path: Path = Path('data/creditcard.csv')
    output_dir: Path = Path('reports/latest')
    seed: int = 123
    train_fraction: float = 0.8
    threshold: float = 0.5
    n_trees: int = 100
    boost_max_depth: int = 6
    boost_learning_rate: float = 0.1
    boost_rounds: int = 100
    balance_method: str = 'rose'
    balance_p: float = 0.5
    models: tuple = ('logistic', 'random_forest', 'xgboost')
    n_jobs: int = 1
    sample_size: int = 1000
    render_plots: bool = True

    def validate(self) -> 'ReportConfig':
        """
        Check knob ranges.

        Returns:
            The config itself, for chaining

        Raises:
            ConfigError: If any value is out of range
        """
        from .models.classifiers import MODEL_REGISTRY

        if not 0.0 < self.train_fraction < 1.0:
            raise ConfigError(
                f"train_fraction must be in (0, 1), got {self.train_fraction}"
            )
        if not 0.0 <= self.threshold <= 1.0:
            raise ConfigError(f"threshold must be in [0, 1], got {self.threshold}")
        if not 0.0 < self.balance_p < 1.0:
            raise ConfigError(f"balance_p must be in (0, 1), got {self.balance_p}")
        if self.balance_method not in BALANCE_METHODS:
            raise ConfigError(
                f"Unknown balance method: {self.balance_method} "
                f"(expected one of {BALANCE_METHODS})"
            )
        for name, value in [
            ('n_trees', self.n_trees),
            ('boost_max_depth', self.boost_max_depth),
            ('boost_rounds', self.boost_rounds),
            ('sample_size', self.sample_size),
        ]:
            if value < 1:
                raise ConfigError(f"{name} must be >= 1, got {value}")
        if self.boost_learning_rate <= 0:
            raise ConfigError(
                f"boost_learning_rate must be > 0, got {self.boost_learning_rate}"
            )
        if self.n_jobs == 0:
            raise ConfigError("n_jobs must be non-zero")
        if not self.models:
            raise ConfigError("At least one model must be selected")
        unknown = [m for m in self.models if m not in MODEL_REGISTRY]
        if unknown:
            raise ConfigError(f"Unknown model type(s): {unknown}")
        return self

    def with_overrides(self, **overrides: Any) -> 'ReportConfig':
        """Return a copy with the non-None overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return _coerce(replace(self, **changes))

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Path):
                value = str(value)
            elif isinstance(value, tuple):
                value = list(value)
            data[f.name] = value
        return data


def _coerce(config: ReportConfig) -> ReportConfig:
    models = config.models
    if isinstance(models, str):
        models = (models,)
    return replace(
        config,
        data_path=Path(config.data_path),
        output_dir=Path(config.output_dir),
        models=tuple(models),
    )


def _check_values(values: Dict[str, Any], source: Any) -> None:
    for name in ('data_path', 'output_dir'):
        if name in values and not isinstance(values[name], (str, Path)):
            raise ConfigError(
                f"{name} in {source} must be a path, got {values[name]!r}"
            )
    models = values.get('models', ())
    if not isinstance(models, (str, list, tuple)):
        raise ConfigError(
            f"models in {source} must be a name or a list of names, got {models!r}"
        )


def load_config(
    path: Optional[Union[str, Path]] = None,
    **overrides: Any
) -> ReportConfig:
    """
    Build a validated config from an optional YAML file plus overrides.

    Args:
        path: YAML file with top-level keys named after ReportConfig fields
        **overrides: Values taking precedence over the file (None is ignored)

    Returns:
        Validated ReportConfig

    Raises:
        ConfigError: If the file holds unknown keys, values of the wrong
            type, or values out of range
    """
    values: Dict[str, Any] = {}

    if path is not None:
        with open(path, 'r') as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        known = {f.name for f in fields(ReportConfig)}
        unknown = set(loaded) - known
        if unknown:
            raise ConfigError(f"Unknown config keys in {path}: {sorted(unknown)}")
        _check_values(loaded, path)
        values.update(loaded)

    try:
        config = _coerce(ReportConfig(**values))
        return config.with_overrides(**overrides).validate()
    except TypeError as e:
        raise ConfigError(f"Invalid config value: {e}") from e
