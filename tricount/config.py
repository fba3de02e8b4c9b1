"""Configuration settings dataclasses."""
import os
from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping, Optional

from .types import COUNTER_DTYPES

BACKENDS = ["auto", "host", "cupy", "scipy"]
STRATEGIES = ["merge", "binary_search", "spgemm"]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_BLOCK_SIZE = 256


@dataclass
class KernelSettings:
    """Settings for a triangle-counting run."""
    backend: str = "auto"
    strategy: Optional[str] = None  # None: the backend's first strategy
    block_size: int = DEFAULT_BLOCK_SIZE
    counter_dtype: str = "uint64"
    timeout: Optional[float] = None  # seconds
    max_workers: Optional[int] = None  # host backend threads
    validate: bool = True

    def validate_settings(self) -> List[str]:
        """Validate settings and return list of errors."""
        errors = []

        if not self.backend:
            errors.append("backend must be set")

        if self.strategy is not None and not self.strategy:
            errors.append("strategy must not be empty")

        if self.block_size <= 0:
            errors.append("block_size must be positive")

        if self.counter_dtype not in COUNTER_DTYPES:
            errors.append(f"counter_dtype must be one of {sorted(COUNTER_DTYPES)}")

        if self.timeout is not None and self.timeout <= 0:
            errors.append("timeout must be positive if specified")

        if self.max_workers is not None and self.max_workers <= 0:
            errors.append("max_workers must be positive if specified")

        return errors


@dataclass
class LoggingSettings:
    """Settings for logging configuration."""
    level: str = "WARNING"
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    # Component-specific levels
    component_levels: Dict[str, str] = field(default_factory=dict)

    def validate_settings(self) -> List[str]:
        """Validate logging settings."""
        errors = []

        if self.level.upper() not in LOG_LEVELS:
            errors.append(f"level must be one of {LOG_LEVELS}")

        for component, level in self.component_levels.items():
            if level.upper() not in LOG_LEVELS:
                errors.append(f"component level for {component} must be one of {LOG_LEVELS}")

        return errors


def _env_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"cannot read {value!r} as a boolean")


_ENV_FIELDS = {
    "TRICOUNT_BACKEND": ("kernel", "backend", str),
    "TRICOUNT_STRATEGY": ("kernel", "strategy", str),
    "TRICOUNT_BLOCK_SIZE": ("kernel", "block_size", int),
    "TRICOUNT_COUNTER_DTYPE": ("kernel", "counter_dtype", str),
    "TRICOUNT_TIMEOUT": ("kernel", "timeout", float),
    "TRICOUNT_MAX_WORKERS": ("kernel", "max_workers", int),
    "TRICOUNT_VALIDATE": ("kernel", "validate", _env_bool),
    "TRICOUNT_LOG_LEVEL": ("logging", "level", str.upper),
}


@dataclass
class Settings:
    """Main settings container."""
    kernel: KernelSettings = field(default_factory=KernelSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    def validate(self) -> Dict[str, List[str]]:
        """Validate all settings and return errors by category."""
        return {
            "kernel": self.kernel.validate_settings(),
            "logging": self.logging.validate_settings(),
        }

    def check(self) -> "Settings":
        """Raise ValueError listing every invalid setting."""
        problems = [
            f"{category}.{error}"
            for category, errors in self.validate().items()
            for error in errors
        ]
        if problems:
            raise ValueError("invalid settings: " + "; ".join(problems))
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Settings with ``TRICOUNT_*`` environment overrides applied."""
        environ = os.environ if environ is None else environ
        overrides = {"kernel": {}, "logging": {}}
        for name, (section, attr, convert) in _ENV_FIELDS.items():
            raw = environ.get(name)
            if raw is None or raw == "":
                continue
            try:
                overrides[section][attr] = convert(raw)
            except ValueError as e:
                raise ValueError(f"{name}={raw!r}: {e}") from None
        settings = cls(
            kernel=replace(KernelSettings(), **overrides["kernel"]),
            logging=replace(LoggingSettings(), **overrides["logging"]),
        )
        return settings.check()
