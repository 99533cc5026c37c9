import logging
import os

from dotenv import load_dotenv

load_dotenv()

# -----------------------------
# CONFIG
# -----------------------------
GROQ_API_KEY = os.getenv("GROQ_API_KEY", "")
GROQ_MODEL = os.getenv("GROQ_MODEL", "openai/gpt-oss-120b")
GROQ_MAX_RETRIES = int(os.getenv("GROQ_MAX_RETRIES", "5"))

HISTORY_FILE = os.getenv("PROCURACAO_HISTORY_FILE", "procuracao_history.json")
HISTORY_LIMIT = int(os.getenv("PROCURACAO_HISTORY_LIMIT", "50"))

LOG_LEVEL = os.getenv("PROCURACAO_LOG_LEVEL", "INFO").upper()


def configure_logging(level: str = LOG_LEVEL):
    """Root logging setup used by the app entry point."""
    logging.basicConfig(level=getattr(logging, level, logging.INFO))
