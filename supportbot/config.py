import os
from dotenv import load_dotenv
from pathlib import Path

# Load environment variables from .env file with explicit path
load_dotenv(dotenv_path=Path(__file__).parent.parent / '.env')

# OpenAI Configuration
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-ada-002")
COMPLETION_MODEL = os.getenv("COMPLETION_MODEL", "gpt-3.5-turbo")
COMPLETION_MAX_TOKENS = int(os.getenv("COMPLETION_MAX_TOKENS", "512"))

# Discord Configuration
DISCORD_BOT_TOKEN = os.getenv("DISCORD_BOT_TOKEN")
DISCORD_API_URL = os.getenv("DISCORD_API_URL", "https://discord.com/api/v10")
SUPPORT_CHANNEL_NAME = os.getenv("SUPPORT_CHANNEL_NAME", "support")

# OS roles. Matched exactly (case-insensitive) against the author's role names.
WINDOWS_ROLE_NAME = os.getenv("WINDOWS_ROLE_NAME", "Windows")
MACOS_ROLE_NAME = os.getenv("MACOS_ROLE_NAME", "MacOS")
LINUX_ROLE_NAME = os.getenv("LINUX_ROLE_NAME", "Linux")

# Google Sheets Configuration
GOOGLE_SHEET_ID = os.getenv("GOOGLE_SHEET_ID")
GOOGLE_SHEET_NAME = os.getenv("GOOGLE_SHEET_NAME")  # optional tab name
GOOGLE_SHEET_RANGE = os.getenv("GOOGLE_SHEET_RANGE", "A1:Z1000")
GOOGLE_SERVICE_ACCOUNT_FILE = os.getenv("GOOGLE_SERVICE_ACCOUNT_FILE")

# Timezone used when stamping user messages in the prompt
BOT_TIMEZONE = os.getenv("BOT_TIMEZONE", "UTC")

# Webhook Configuration
WEBHOOK_SECRET = os.getenv("WEBHOOK_SECRET")
