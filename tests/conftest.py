"""Keep the app's own engine off the filesystem during tests."""

import os

os.environ.setdefault("GATEWAY_REGISTRY_DATABASE_URL", "sqlite://")
os.environ.setdefault("GATEWAY_REGISTRY_SEED_DEVICE_TYPES", "false")
