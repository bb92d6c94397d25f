import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]


def load_env_file(env_path: Path) -> None:
    """Load KEY=VALUE lines from a .env file without overriding the real environment."""
    if not env_path.exists():
        return
    for line in env_path.read_text(encoding="utf-8", errors="ignore").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, val = line.split("=", 1)
        os.environ.setdefault(key.strip(), val.strip().strip("\"'"))


load_env_file(BASE_DIR / ".env")

DATABASE_URL = os.environ.get("DATABASE_URL", "") or f"sqlite:///{BASE_DIR / 'production.db'}"

# Hosted Postgres URLs may use the postgres:// scheme; SQLAlchemy needs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

GROQ_API_KEY = os.environ.get("GROQ_API_KEY", "")
GROQ_API_URL = os.environ.get("GROQ_API_URL", "https://api.groq.com/openai/v1/chat/completions")
GROQ_VISION_MODEL = os.environ.get("GROQ_VISION_MODEL", "meta-llama/llama-4-scout-17b-16e-instruct")

ANTHROPIC_API_KEY = os.environ.get("ANTHROPIC_API_KEY", "")
CLAUDE_MODEL = os.environ.get("CLAUDE_MODEL", "claude-sonnet-4-5-20250929")

EXTRACTION_TIMEOUT = float(os.environ.get("EXTRACTION_TIMEOUT", "60"))

LOG_DIR = Path(os.environ.get("LOG_DIR", str(BASE_DIR / "logs")))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
