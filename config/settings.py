'''
All settings, configurations, and constants for CerebroChat.
'''

import os

from dotenv import load_dotenv

load_dotenv()


def _float_env(name: str):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Data paths
DATA_DIR = os.getenv("DATA_DIR", "data")

RAW_DATA_DIR = os.path.join(DATA_DIR, "raw_csv")
PLAYERS_CSV = os.getenv("PLAYERS_CSV", os.path.join(RAW_DATA_DIR, "ncaa_players_d1_male.csv"))

PARQUET_DATA_DIR = os.path.join(DATA_DIR, "parquet")
PLAYERS_PARQUET = os.getenv("PLAYERS_PARQUET", os.path.join(PARQUET_DATA_DIR, "players.parquet"))

CACHE_DIR = os.path.join(DATA_DIR, "cache")
PERCENTILE_CACHE_PATH = os.getenv(
    "PERCENTILE_CACHE_PATH", os.path.join(CACHE_DIR, "position_percentiles.json")
)

# Vectorstore output directory
VECTORSTORE_DIR = os.getenv("VECTORSTORE_DIR", "vector_stores")
PLAYER_PROFILES_INDEX = os.path.join(VECTORSTORE_DIR, "player_profiles_index")

# LLM provider: tamu | gemini | ollama
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "tamu").strip().lower()

TAMU_API_KEY = os.getenv("TAMU_API_KEY", "")
TAMU_BASE_URL = os.getenv("TAMU_BASE_URL", "https://chat.tamu.ai")
TAMU_CHAT_MODELS = [
    m.strip() for m in os.getenv("TAMU_CHAT_MODELS", "gpt5.2,gpt5.1,gpt5").split(",") if m.strip()
]

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_CHAT_MODEL = os.getenv("GEMINI_CHAT_MODEL", "gemini-2.5-flash")

OLLAMA_URL = os.getenv("OLLAMA_URL", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.1")

LLM_TEMPERATURE = _float_env("LLM_TEMPERATURE")
LLM_TOP_P = _float_env("LLM_TOP_P")
LLM_MAX_TOKENS = _float_env("LLM_MAX_TOKENS")
# Some gateways answer with an event stream even for non-streaming requests
LLM_STREAM = os.getenv("LLM_STREAM", "false").strip().lower() in {"1", "true", "yes"}

# Status codes that mean "this model is unavailable, try the next one"
RETRYABLE_STATUS_CODES = {400, 404, 422}

# Embeddings for the player profile index: openai | ollama
EMBEDDING_PROVIDER = os.getenv("EMBEDDING_PROVIDER", "openai").strip().lower()
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
OLLAMA_EMBED_MODEL = os.getenv("OLLAMA_EMBED_MODEL", "nomic-embed-text")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
PROFILE_RESULTS = _int_env("PROFILE_RESULTS", 5)

# Player search
DEFAULT_SEARCH_LIMIT = 20
MAX_SEARCH_LIMIT = 100
FUZZY_TOKEN_LIMIT = 25
FUZZY_MATCH_THRESHOLD = 0.45
MAX_CANDIDATES = 5

# Rankings
DEFAULT_TOP_LIMIT = 10
DEFAULT_MIN_GAMES = 5

# Percentile thresholds
ELITE_PERCENTILE = 0.9
PERCENTILE_CACHE_MAX_AGE_HOURS = 12

# Session memory
SESSION_TTL_SECONDS = 30 * 60
SESSION_MAX_ENTRIES = _int_env("SESSION_MAX_ENTRIES", 1024)
SESSION_ID_MAX_LENGTH = 128

# API
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = _int_env("PORT", 5000)
