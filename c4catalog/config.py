from typing import List

from pydantic_settings import BaseSettings
from pathlib import Path

# Get the repository root directory (parent of c4catalog directory)
REPO_ROOT = Path(__file__).parent.parent.absolute()

class Settings(BaseSettings):
    """Application settings."""
    
    # API settings
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_RELOAD: bool = True
    CORS_ORIGINS: List[str] = ["*"]
    
    # Version and environment
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    
    # Storage settings
    DATA_DIR: str = str(REPO_ROOT / "storage" / "data")
    
    class Config:
        env_file = ".env"

settings = Settings()
