"""
Quiz Session Service Configuration Settings

Timing, integrity policy and registry limits for quiz sessions.
Values can be overridden from the environment or a .env file.
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Configuration for the quiz session service."""
    
    # API Settings
    APP_NAME: str = "Quiz Session Service"
    DEBUG: bool = True
    
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_DIR: str = "logs"
    LOG_MAX_BYTES: int = 10 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 5
    LOG_QUIZ_EVENTS_FILE: bool = True  # separate file for [QUIZ] event lines
    
    # Timer Settings
    TIMER_TICK_SECONDS: float = 1.0
    MIN_DURATION_SECONDS: int = 1
    DEFAULT_TIME_LIMIT_MINUTES: int = 15
    MAX_TIME_LIMIT_MINUTES: int = 180
    LOW_TIME_THRESHOLD_SECONDS: int = 300  # clock turns red under 5 minutes
    
    # Integrity Settings
    MAX_VISIBILITY_WARNINGS: int = 1  # visibility losses tolerated before termination
    
    # Session Registry
    MAX_ACTIVE_SESSIONS: int = 500
    MAX_QUESTION_COUNT: int = 50
    MAX_HISTORY_RESULTS: int = 1000
    
    # Reporting
    PASS_MARK_PERCENT: int = 60
    QUICK_RESPONSE_SECONDS: int = 30
    SLOW_RESPONSE_SECONDS: int = 60
    
    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
