from dataclasses import dataclass
import os
from dotenv import load_dotenv


load_dotenv()


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    default_passing_grade: float = float(os.getenv("FINALCALC_PASSING_GRADE", "60"))
    history_db_path: str = os.getenv("FINALCALC_DB_PATH", "data/finalcalc.db")
    log_level: str = os.getenv("FINALCALC_LOG_LEVEL", "INFO").upper()

    web_mode: bool = os.getenv("FINALCALC_WEB", "0") == "1"
    port: int = int(os.getenv("PORT", "8550"))

    cors_allowed_origins: tuple[str, ...] = _split_csv(
        os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
    )


settings = Settings()
