import os
from dataclasses import dataclass

from dotenv import load_dotenv

from utils.urls import extract_label

load_dotenv()

BASE_URL = os.getenv("BASE_URL", "http://localhost:8000")
SHORT_CODE_LENGTH = int(os.getenv("SHORT_CODE_LENGTH", "6"))
DEFAULT_EXPIRY_DAYS = int(os.getenv("DEFAULT_EXPIRY_DAYS", "7"))


@dataclass(frozen=True)
class ShortenerSettings:
    base_url: str = BASE_URL
    short_code_length: int = SHORT_CODE_LENGTH
    # 0 or negative disables the default expiry
    default_expiry_days: int = DEFAULT_EXPIRY_DAYS

    @property
    def label(self) -> str:
        return extract_label(self.base_url)

    @classmethod
    def from_env(cls) -> "ShortenerSettings":
        return cls(
            base_url=os.getenv("BASE_URL", BASE_URL),
            short_code_length=int(os.getenv("SHORT_CODE_LENGTH", str(SHORT_CODE_LENGTH))),
            default_expiry_days=int(os.getenv("DEFAULT_EXPIRY_DAYS", str(DEFAULT_EXPIRY_DAYS))),
        )
