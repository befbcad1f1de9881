import os

# Read by get_settings() when task_api.main is first imported
os.environ.setdefault("LOG_FILES_ENABLED", "false")
os.environ.setdefault("OTEL_ENABLED", "false")
os.environ.setdefault("STATIC_DIR", "tests/static-does-not-exist")
os.environ.setdefault("TASK_STORE_BACKEND", "redis")
