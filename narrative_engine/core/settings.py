import os

from pydantic import BaseModel


class Settings(BaseModel):
    # Core
    APP_NAME: str = os.getenv("APP_NAME", "Narrative Outcomes Engine")
    APP_ENV: str = os.getenv("APP_ENV", "prod")  # prod|dev|test


settings = Settings()
