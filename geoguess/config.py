import os
from pathlib import Path
from dotenv import load_dotenv

DEVELOPMENT_ENV = ".env"
PRODUCTION_ENV = ".env.production"

def _env_path(name: str, default: Path) -> Path:
    """Get an environment variable as a Path. If the variable is not set or empty, return the default."""
    raw = (os.getenv(name) or "").strip()
    return Path(raw) if raw else default


def _env_bool(name: str, default: bool) -> bool:
    """Get an environment variable as a boolean. Recognizes '1', 'true', 'yes', 'on' as True and '0', 'false', 'no', 'off' as False. Anything else returns the default."""
    raw = (os.getenv(name) or "").strip().lower()
    if raw in {"1", "true", "yes", "on"}:
        return True
    if raw in {"0", "false", "no", "off"}:
        return False
    return default


def _env_int(name: str, default: int) -> int:
    """Get an environment variable as an integer. If the variable is not set or cannot be converted to an integer, return the default."""
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    """Get an environment variable as a float. If invalid or missing, return the default."""
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_choice(name: str, default: str, allowed: set[str]) -> str:
    """
    Get an environment variable as a choice from a set of allowed values.
    If the variable is not set or not in the allowed set, return the default.
    """
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    if raw in allowed:
        return raw
    return default


def _env_radii(name: str, default: tuple[int, ...]) -> tuple[int, ...]:
    """
    Get an environment variable as a comma separated list of search radii in metres.
    The list must hold positive, non-decreasing integers, otherwise the default is returned.
    """
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        radii = tuple(int(part) for part in raw.split(",") if part.strip())
    except ValueError:
        return default
    if not radii or any(r <= 0 for r in radii):
        return default
    if any(b < a for a, b in zip(radii, radii[1:])):
        return default
    return radii


class Config:
    BASE_DIR = Path(__file__).resolve().parents[1]  # project root, wherever it is
    PACKAGE_DIR = Path(__file__).resolve().parent

    load_dotenv(Path(BASE_DIR) / DEVELOPMENT_ENV)

    # ================ Application Settings ================
    SECRET_KEY = os.getenv("SECRET_KEY", "super-secret-key")
    PORT = _env_int("PORT", 5000)
    DEBUG = _env_bool("FLASK_DEBUG", False)
    TESTING = False

    # ================ Logging Settings ================
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()
    LOG_FORMAT = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s | %(levelname)-7s | %(parent_file)s:%(lineno)-3d | %(message)s",
    )
    LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
    LOG_DIR = _env_path("LOG_DIR", BASE_DIR / "logs")
    LOG_FILE = os.getenv("LOG_FILE", "app.log")
    LOG_TO_FILE = _env_bool("LOG_TO_FILE", True)
    LOG_MAX_BYTES = _env_int("LOG_MAX_BYTES", 10 * 1024 * 1024)  # 10 MB
    LOG_BACKUP_COUNT = _env_int("LOG_BACKUP_COUNT", 5)
    WERKZEUG_LOG_LEVEL = "INFO"

    # ================ Place Catalog ================
    PLACES_SOURCE = os.getenv("PLACES_SOURCE") or str(PACKAGE_DIR / "static" / "data" / "places.json")
    PLACES_TIMEOUT_SECONDS = _env_float("PLACES_TIMEOUT_SECONDS", 10.0)

    # ================ Imagery Coverage ================
    IMAGERY_PROVIDER = _env_choice("IMAGERY_PROVIDER", "google", {"google", "mapillary"})
    GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY", "")
    MAPILLARY_ACCESS_TOKEN = os.getenv("MAPILLARY_ACCESS_TOKEN") or os.getenv("MAPILLARY_TOKEN") or ""
    IMAGERY_TIMEOUT_SECONDS = _env_float("IMAGERY_TIMEOUT_SECONDS", 10.0)
    COVERAGE_RADII = _env_radii("COVERAGE_RADII", (50, 150, 300, 600))

    # ================ Play Settings ================
    DIFFICULTY_POLICY = _env_choice("DIFFICULTY_POLICY", "weighted", {"weighted", "score_gated"})
    SCORE_GATE_LOW = _env_int("SCORE_GATE_LOW", 3)
    SCORE_GATE_MID = _env_int("SCORE_GATE_MID", 6)
    GUESS_MODE = _env_choice("GUESS_MODE", "combined", {"combined", "country", "place", "city"})
    MAX_SESSIONS = _env_int("MAX_SESSIONS", 1000)


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = "DEBUG"


class TestingConfig(Config):
    DEBUG = True
    TESTING = True
    LOG_LEVEL = "DEBUG"
    LOG_TO_FILE = False
    MAX_SESSIONS = 8


class ProductionConfig(Config):
    DEBUG = False
    LOG_LEVEL = "INFO"

    WERKZEUG_LOG_LEVEL = "WARNING"  # Reduce noisy request logs
