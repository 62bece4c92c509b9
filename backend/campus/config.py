"""Application settings and validation."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE = Path(__file__).resolve().parent.parent
DEFAULT_ACCESS_SECRET = "change_me_access_secret"
DEFAULT_REFRESH_SECRET = "change_me_refresh_secret"


class Settings:
    ENV: str
    DATABASE_URL: str
    JWT_ACCESS_SECRET: str
    JWT_REFRESH_SECRET: str
    JWT_ALGORITHM: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int
    REFRESH_TOKEN_EXPIRE_DAYS: int
    LOG_LEVEL: str
    ALLOW_INSECURE_JWT: bool
    ALLOW_DEV_CORS: bool

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE / 'campus.db'}")
        self.JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", DEFAULT_ACCESS_SECRET)
        self.JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", DEFAULT_REFRESH_SECRET)
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
        self.REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.ALLOW_INSECURE_JWT = os.getenv("ALLOW_INSECURE_JWT", "false").lower() == "true"
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self._validate()

    def _validate(self):
        if self.ENV != "dev" and not self.ALLOW_INSECURE_JWT:
            if self.JWT_ACCESS_SECRET == DEFAULT_ACCESS_SECRET or self.JWT_REFRESH_SECRET == DEFAULT_REFRESH_SECRET:
                raise RuntimeError("JWT secrets must be set to non-default values in non-dev environments")
        if self.JWT_ACCESS_SECRET == self.JWT_REFRESH_SECRET:
            raise RuntimeError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")
        if self.ACCESS_TOKEN_EXPIRE_MINUTES <= 0 or self.REFRESH_TOKEN_EXPIRE_DAYS <= 0:
            raise RuntimeError("token lifetimes must be positive")


settings = Settings()
