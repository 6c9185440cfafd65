import os

from dotenv import load_dotenv

# Load .env variables
load_dotenv()

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Object storage for photos and area/community images
SUPABASE_URL: str = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY: str = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
SUPABASE_STORAGE_BUCKET: str = os.getenv("SUPABASE_STORAGE_BUCKET", "emma")

# Public values handed to the front end
AUTH0_DOMAIN: str = os.getenv("AUTH0_DOMAIN")
AUTH0_CLIENT_ID: str = os.getenv("AUTH0_CLIENT_ID")
GOOGLE_MAPS_API_KEY: str = os.getenv("GOOGLE_MAPS_API_KEY")

ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
ALLOWED_HEADERS = ["Content-Type", "Authorization"]
