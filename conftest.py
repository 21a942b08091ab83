"""
Root pytest configuration for the SIANI wellness service.

Sets up the Python path and test environment variables for all test directories.
"""

import os
import sys
from pathlib import Path

# Set test environment variables before anything else imports settings
os.environ.setdefault("WELLNESS_SERVICE_ENV", "testing")
os.environ.setdefault("WELLNESS_SERVICE_LOG_LEVEL", "DEBUG")
os.environ.setdefault("WELLNESS_SERVICE_SEED_ON_STARTUP", "true")
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SEED_ENVIRONMENT", "test")

# External providers stay disabled so tests never leave the process
os.environ["OPENAI_API_KEY"] = ""
os.environ["ELEVENLABS_API_KEY"] = ""

# Project root
project_root = Path(__file__).parent

# Add src directory to path for imports (siani_common, wellness_service, etc.)
src_path = project_root / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))
