"""Configuration settings for FarsiFlow."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))
MEDIA_DIR = DATA_DIR / "media"
PRONUNCIATIONS_DIR = MEDIA_DIR / "pronunciations"

# Curriculum settings
STAGES_PER_LEVEL = 10
MILESTONE_XP = 100  # xp between two ranks


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        DATA_DIR,
        MEDIA_DIR,
        PRONUNCIATIONS_DIR,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


@dataclass
class PathSettings:
    """Path configuration settings."""
    base_dir: Path = BASE_DIR
    data_dir: Path = DATA_DIR
    media_dir: Path = MEDIA_DIR
    pronunciations_dir: Path = PRONUNCIATIONS_DIR


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///farsiflow.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    max_bytes: int = int(os.getenv("LOG_MAX_BYTES", str(10 * 1024 * 1024)))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "5"))


@dataclass
class BotSettings:
    """Bot configuration settings."""
    token: str = os.getenv("TELEGRAM_BOT_TOKEN", "")
    metrics_port: int = int(os.getenv("METRICS_PORT", "0"))  # 0 disables the exporter


@dataclass
class ProgressionSettings:
    """Level progression and streak settings."""
    xp_per_correct_answer: int = int(os.getenv("XP_PER_CORRECT_ANSWER", "10"))
    milestone_xp: int = MILESTONE_XP
    # IANA zone used to decide calendar days for streaks; empty means system local time
    streak_timezone: str = os.getenv("STREAK_TIMEZONE", "")


@dataclass
class LeaderboardSettings:
    """Leaderboard synthesis settings."""
    jitter: int = int(os.getenv("LEADERBOARD_JITTER", "100"))
    min_xp: int = int(os.getenv("LEADERBOARD_MIN_XP", "10"))


@dataclass
class ContentSettings:
    """Content generation settings."""
    target_language: str = os.getenv("TARGET_LANGUAGE", "EN")
    questions_per_quiz: int = int(os.getenv("QUESTIONS_PER_QUIZ", "10"))
    options_per_question: int = int(os.getenv("OPTIONS_PER_QUESTION", "4"))
    handout_vocabulary_size: int = int(os.getenv("HANDOUT_VOCABULARY_SIZE", "6"))


@dataclass
class AudioSettings:
    """Pronunciation settings."""
    lang: str = os.getenv("PRONUNCIATION_LANG", "fa")
    slow: bool = os.getenv("PRONUNCIATION_SLOW", "false").lower() == "true"


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_bot_settings() -> BotSettings:
    """Get bot settings."""
    return BotSettings()


def get_progression_settings() -> ProgressionSettings:
    """Get progression settings."""
    return ProgressionSettings()


def get_leaderboard_settings() -> LeaderboardSettings:
    """Get leaderboard settings."""
    return LeaderboardSettings()


def get_content_settings() -> ContentSettings:
    """Get content settings."""
    return ContentSettings()


def get_audio_settings() -> AudioSettings:
    """Get audio settings."""
    return AudioSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    bot: BotSettings = field(default_factory=get_bot_settings)
    progression: ProgressionSettings = field(default_factory=get_progression_settings)
    leaderboard: LeaderboardSettings = field(default_factory=get_leaderboard_settings)
    content: ContentSettings = field(default_factory=get_content_settings)
    audio: AudioSettings = field(default_factory=get_audio_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if self.progression.xp_per_correct_answer < 0:
            raise ValueError("XP_PER_CORRECT_ANSWER cannot be negative")

        if self.leaderboard.jitter < 0:
            raise ValueError("LEADERBOARD_JITTER cannot be negative")

        if self.leaderboard.min_xp < 0:
            raise ValueError("LEADERBOARD_MIN_XP cannot be negative")

        if self.content.options_per_question < 2:
            raise ValueError("OPTIONS_PER_QUESTION must be at least 2")

    def validate_bot(self) -> None:
        """Validate settings needed to run the Telegram front end."""
        if not self.bot.token:
            raise ValueError("TELEGRAM_BOT_TOKEN is required")


# Create global settings instance
settings = Settings()
settings.validate()
