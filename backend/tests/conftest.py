import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-the-wealthwise-suite")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("LOG_JSON", "false")
