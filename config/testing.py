import os

SECRET_KEY = "test-secret"

FIRESTORE_CONFIG = {
    "project_id": os.getenv("FIREBASE_PROJECT_ID", "idmc-2026-test"),
    "credentials_path": "",
    "emulator_host": os.getenv("FIRESTORE_EMULATOR_HOST", "localhost:8080"),
    "functions_base_url": os.getenv("FUNCTIONS_BASE_URL", ""),
}

FUNCTIONS_REGION = "asia-southeast1"
CONFERENCE_YEAR = 2026

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
