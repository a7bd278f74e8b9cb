"""
Application constants
"""

# OpenAI
OPENAI_DEFAULT_MODEL = "gpt-4o-mini"
OPENAI_FALLBACK_MODEL = "gpt-4o"
OPENAI_MAX_TOKENS = 600  # Classification replies are short
OPENAI_TEMPERATURE = 0.2

# Task defaults
DEFAULT_JUSTIFICATION = "Directly added by user without AI assessment."
TASK_TITLE_MAX_LENGTH = 500

# Storage
DEFAULT_STORE_PATH = "data/tasks.json"
STORE_BACKENDS = ("json", "memory")

# Confirmation prompts for destructive operations
CONFIRM_DELETE_PROMPT = 'Are you sure you want to delete the task "{title}"?'
CONFIRM_CLEAR_COMPLETED_PROMPT = "Are you sure you want to clear all {count} completed tasks?"

# Logging
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
