"""Test suite. Settings are pinned here, before any storerate module reads them."""

import os

os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["ALLOW_ADMIN_SIGNUP"] = "false"
