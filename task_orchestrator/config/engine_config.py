"""
Engine configuration - Settings for the planning/execution engine
"""

from dataclasses import dataclass, fields
from typing import Any, Dict

from .env_config import EnvConfig


VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class EngineConfig:
    """
    Configuration settings for the task orchestration engine.

    Attributes:
        max_continuous_failures: Consecutive failures that stop the pass loop (default: 5)
        rethink_escalation_threshold: Consecutive failures after which rethink
            looks for alternatives or skips non-critical steps (default: 3)
        max_improvement_attempts: Self-improvement attempts allowed per task (default: 2)
        improvement_confidence_threshold: Diagnosis confidence required before a
            new tool is requested (default: 0.7)
        max_retries: Retry budget recorded on each new task (default: 3)
        self_improvement_enabled: Try self-improvement before rethinking (default: True)
        autonomous_mode: Stored mode flag, reserved for future use (default: True)
        auto_generate_steps: Append follow-up steps after completions (default: True)
        max_passes: Upper bound on scheduler passes per execute call (default: 500)
        log_level: Logging level (default: 'INFO')
    """

    max_continuous_failures: int = 5
    rethink_escalation_threshold: int = 3
    max_improvement_attempts: int = 2
    improvement_confidence_threshold: float = 0.7
    max_retries: int = 3
    self_improvement_enabled: bool = True
    autonomous_mode: bool = True
    auto_generate_steps: bool = True
    max_passes: int = 500
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.max_continuous_failures < 1:
            raise ValueError("max_continuous_failures must be at least 1")

        if not 1 <= self.rethink_escalation_threshold <= self.max_continuous_failures:
            raise ValueError(
                "rethink_escalation_threshold must be between 1 and max_continuous_failures"
            )

        if self.max_improvement_attempts < 0:
            raise ValueError("max_improvement_attempts cannot be negative")

        if not 0 <= self.improvement_confidence_threshold <= 1:
            raise ValueError(
                f"improvement_confidence_threshold must be between 0 and 1, "
                f"got {self.improvement_confidence_threshold}"
            )

        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")

        if self.max_passes < 1:
            raise ValueError("max_passes must be at least 1")

        self.log_level = self.log_level.upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {self.log_level}")

    @classmethod
    def from_env(cls, prefix: str = "ORCHESTRATOR_") -> "EngineConfig":
        """
        Create configuration from environment variables.

        Example:
            export ORCHESTRATOR_MAX_CONTINUOUS_FAILURES=5
            export ORCHESTRATOR_SELF_IMPROVEMENT_ENABLED=false
            config = EngineConfig.from_env()
        """
        return cls(
            max_continuous_failures=EnvConfig.get_int(f"{prefix}MAX_CONTINUOUS_FAILURES", 5),
            rethink_escalation_threshold=EnvConfig.get_int(f"{prefix}RETHINK_ESCALATION_THRESHOLD", 3),
            max_improvement_attempts=EnvConfig.get_int(f"{prefix}MAX_IMPROVEMENT_ATTEMPTS", 2),
            improvement_confidence_threshold=EnvConfig.get_float(
                f"{prefix}IMPROVEMENT_CONFIDENCE_THRESHOLD", 0.7
            ),
            max_retries=EnvConfig.get_int(f"{prefix}MAX_RETRIES", 3),
            self_improvement_enabled=EnvConfig.get_bool(f"{prefix}SELF_IMPROVEMENT_ENABLED", True),
            autonomous_mode=EnvConfig.get_bool(f"{prefix}AUTONOMOUS_MODE", True),
            auto_generate_steps=EnvConfig.get_bool(f"{prefix}AUTO_GENERATE_STEPS", True),
            max_passes=EnvConfig.get_int(f"{prefix}MAX_PASSES", 500),
            log_level=EnvConfig.get(f"{prefix}LOG_LEVEL", "INFO"),
        )

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "EngineConfig":
        """Create configuration from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in config_dict.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}
