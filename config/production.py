import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

FIRESTORE_CONFIG = {
    "project_id": os.getenv("FIREBASE_PROJECT_ID", "idmc-2026"),
    "credentials_path": os.getenv("GOOGLE_APPLICATION_CREDENTIALS", ""),
    "emulator_host": os.getenv("FIRESTORE_EMULATOR_HOST", ""),
    "functions_base_url": os.getenv("FUNCTIONS_BASE_URL", ""),
}

FUNCTIONS_REGION = os.getenv("FUNCTIONS_REGION", "asia-southeast1")
CONFERENCE_YEAR = int(os.getenv("CONFERENCE_YEAR", "2026"))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
