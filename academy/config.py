import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./academy.db")

# Supabase Auth (GoTrue) Configuration
SUPABASE_URL = os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
# Password sign-in only needs the public key; fall back to the service key
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY") or SUPABASE_SERVICE_ROLE_KEY
SUPABASE_TIMEOUT_SECONDS = float(os.getenv("SUPABASE_TIMEOUT_SECONDS", "10"))
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "sb-access-token")

# Stripe Configuration
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
CHECKOUT_CURRENCY = os.getenv("CHECKOUT_CURRENCY", "aud")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
RESEND_FROM_EMAIL = os.getenv("RESEND_FROM_EMAIL", "no-reply@vigyanitacademy.com")
ANNOUNCEMENT_FROM_EMAIL = os.getenv("ANNOUNCEMENT_FROM_EMAIL", "ViGyanIT <onboarding@resend.dev>")
INQUIRY_FROM_EMAIL = os.getenv("INQUIRY_FROM_EMAIL", "Vigyan Inquiry <onboarding@resend.dev>")
OFFICE_EMAIL = os.getenv("OFFICE_EMAIL", "office@vigyanitacademy.com")
# Resend caps recipients per message
ANNOUNCEMENT_MAX_RECIPIENTS = int(os.getenv("ANNOUNCEMENT_MAX_RECIPIENTS", "50"))

# Student logins use a synthetic address built from the student number
STUDENT_EMAIL_DOMAIN = os.getenv("STUDENT_EMAIL_DOMAIN", "student.vigyanit.com")

# Public site origin for Stripe redirects (falls back to the request origin)
SITE_URL = os.getenv("SITE_URL")

# Nominatim (OpenStreetMap) address lookup
NOMINATIM_BASE_URL = os.getenv("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org")
NOMINATIM_USER_AGENT = os.getenv(
    "NOMINATIM_USER_AGENT", "vigyanit-academy/1.0 (contact@vigyanitacademy.com)"
)
NOMINATIM_COUNTRY_CODES = os.getenv("NOMINATIM_COUNTRY_CODES", "au")
NOMINATIM_MAX_RESULTS = int(os.getenv("NOMINATIM_MAX_RESULTS", "10"))

# Cloudflare Turnstile - checks are skipped when unset
TURNSTILE_SECRET_KEY = os.getenv("TURNSTILE_SECRET_KEY")

# Password policy for self-service changes
MIN_PASSWORD_LENGTH = int(os.getenv("MIN_PASSWORD_LENGTH", "12"))
