"""Root pytest configuration."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Tests never touch the hosted database or third-party services; these must
# be in place before academy.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_URL"] = "https://academy-test.supabase.co"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-service-role-key"
os.environ["SUPABASE_ANON_KEY"] = "test-anon-key"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_academy"
os.environ["RESEND_API_KEY"] = ""
os.environ["TURNSTILE_SECRET_KEY"] = ""
os.environ["SITE_URL"] = "https://vigyanitacademy.test"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

# Load remaining environment variables before tests run
_root = Path(__file__).parent
load_dotenv(_root / ".env")
