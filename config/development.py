import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

FIRESTORE_CONFIG = {
    "project_id": os.getenv("FIREBASE_PROJECT_ID", "idmc-2026-dev"),
    "credentials_path": os.getenv("GOOGLE_APPLICATION_CREDENTIALS", ""),
    # Point at the local emulator unless told otherwise.
    "emulator_host": os.getenv("FIRESTORE_EMULATOR_HOST", "localhost:8080"),
    "functions_base_url": os.getenv("FUNCTIONS_BASE_URL", ""),
}

FUNCTIONS_REGION = os.getenv("FUNCTIONS_REGION", "asia-southeast1")
CONFERENCE_YEAR = int(os.getenv("CONFERENCE_YEAR", "2026"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
