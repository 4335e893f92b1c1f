"""Bot configuration and environment variables"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()

# Project root
BASE_DIR = Path(__file__).parent

# Telegram Bot Token
BOT_TOKEN = os.getenv("BOT_TOKEN")
if not BOT_TOKEN:
    raise ValueError("BOT_TOKEN is not set in the environment!")

# OpenRouter (OpenAI-compatible) settings
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://openrouter.ai/api/v1")
LLM_MODEL = os.getenv("LLM_MODEL", "deepseek/deepseek-chat-v3.1:free")

if not OPENAI_API_KEY:
    raise ValueError("OPENAI_API_KEY is not set in the environment!")

# Sent as HTTP-Referer / X-Title so OpenRouter can attribute requests
APP_URL = os.getenv("APP_URL", "https://t.me")
APP_TITLE = "AI Website Generator"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = BASE_DIR / "bot.log"

# LLM settings
LLM_MAX_TOKENS = 4000
LLM_TEMPERATURE = 0.7
LLM_TIMEOUT = 120  # seconds

# Export settings
EXPORT_DIR = BASE_DIR / "exports"
EXPORT_FILENAME = "my-website.html"

# Telegram caps a message at 4096 characters
MAX_MESSAGE_LENGTH = 4000
