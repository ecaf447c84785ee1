"""Global configuration values."""

import os

# Text generation provider for the chat wrapper ("openai" or "gemini")
LLM_PROVIDER = os.environ.get("EDUGUIDE_LLM_PROVIDER", "openai").lower()

# Default OpenAI model for chat replies (can be overridden via env)
OPENAI_CHAT_MODEL = os.environ.get("OPENAI_CHAT_MODEL", "gpt-4.1-mini")

# Default Gemini model (can be overridden via env)
DEFAULT_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.0-flash")

# Upper bound in seconds for one text generation call
GENERATION_TIMEOUT = float(os.environ.get("GENERATION_TIMEOUT", "45"))

# Official-site research
FIRECRAWL_API_URL = os.environ.get("FIRECRAWL_API_URL", "https://api.firecrawl.dev/v1/scrape")
RESEARCH_TIMEOUT = float(os.environ.get("RESEARCH_TIMEOUT", "25"))

# Toggle plain HTTP fetch of college sites when no Firecrawl key is configured
USE_DIRECT_RESEARCH = os.environ.get("EDUGUIDE_DIRECT_RESEARCH", "false").lower() in ("1", "true", "yes")

MAX_HISTORY_TURNS = 14
MAX_RESEARCH_COLLEGES = 2

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
