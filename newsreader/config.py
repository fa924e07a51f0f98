import os
from dotenv import load_dotenv

load_dotenv()

NEWS_API_KEY = os.getenv("NEWS_API_KEY")
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")

# Seconds; NewsAPI pages are refreshed at most once an hour
CACHE_TIMEOUT = int(os.getenv("CACHE_TIMEOUT", "3600"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

REQUIRED_KEYS = ("NEWS_API_KEY", "GEMINI_API_KEY")


def missing_keys():
    """
    Names of required API keys that are not configured.
    """
    return [name for name in REQUIRED_KEYS if not globals().get(name)]
