"""Configuration settings for the pronunciation coach."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))
VOCABULARY_FILE = Path(os.getenv("VOCABULARY_FILE", str(DATA_DIR / "vocab.json")))
PHRASE_SEED_FILE = Path(os.getenv("PHRASE_SEED_FILE", str(DATA_DIR / "base_data.json")))

# Search strategies understood by the phrase selector
SEARCH_STRATEGIES = ("urgency", "attempts", "mixed")


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


@dataclass
class PathSettings:
    """Path configuration settings."""
    data_dir: Path = DATA_DIR
    vocabulary_file: Path = VOCABULARY_FILE
    phrase_seed_file: Path = PHRASE_SEED_FILE


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///phonecoach.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class LearningSettings:
    """Proficiency update and scheduling settings."""
    initial_score: float = float(os.getenv("INITIAL_SCORE", "0.5"))
    base_rate: float = float(os.getenv("BASE_RATE", "0.5"))
    rate_decay: float = float(os.getenv("RATE_DECAY", "0.02"))
    min_rate: float = float(os.getenv("MIN_RATE", "0.1"))
    recency_decay_per_day: float = float(os.getenv("RECENCY_DECAY_PER_DAY", "0.05"))
    targets_per_refill: int = int(os.getenv("TARGETS_PER_REFILL", "3"))
    max_phrases_per_refill: int = int(os.getenv("MAX_PHRASES_PER_REFILL", "5"))
    refill_watermark: int = int(os.getenv("REFILL_WATERMARK", "2"))
    history_capacity: int = int(os.getenv("HISTORY_CAPACITY", "50"))
    random_picks_per_category: int = int(os.getenv("RANDOM_PICKS_PER_CATEGORY", "3"))
    eval_score_scale: float = float(os.getenv("EVAL_SCORE_SCALE", "1.0"))
    initial_strategy: str = os.getenv("INITIAL_STRATEGY", "mixed")


@dataclass
class MonitoringSettings:
    """Metrics exporter settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_learning_settings() -> LearningSettings:
    """Get learning settings."""
    return LearningSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    learning: LearningSettings = field(default_factory=get_learning_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        learning = self.learning

        if not 0 <= learning.initial_score <= 1:
            raise ValueError("INITIAL_SCORE must be between 0 and 1")

        if not 0 < learning.min_rate <= learning.base_rate <= 1:
            raise ValueError("MIN_RATE and BASE_RATE must satisfy 0 < MIN_RATE <= BASE_RATE <= 1")

        if learning.rate_decay < 0:
            raise ValueError("RATE_DECAY cannot be negative")

        if learning.targets_per_refill < 1:
            raise ValueError("TARGETS_PER_REFILL must be positive")

        if learning.max_phrases_per_refill < 1:
            raise ValueError("MAX_PHRASES_PER_REFILL must be positive")

        if learning.refill_watermark < 0:
            raise ValueError("REFILL_WATERMARK cannot be negative")

        if learning.history_capacity < 1:
            raise ValueError("HISTORY_CAPACITY must be positive")

        if learning.eval_score_scale <= 0:
            raise ValueError("EVAL_SCORE_SCALE must be positive")

        if learning.initial_strategy not in SEARCH_STRATEGIES:
            raise ValueError(f"INITIAL_STRATEGY must be one of {', '.join(SEARCH_STRATEGIES)}")


# Create global settings instance
settings = Settings()
settings.validate()
