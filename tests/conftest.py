"""Shared fixtures; fixture modules live in tests/fixtures/."""

import os

os.environ.setdefault("ENV", "test")

from tests.fixtures.messaging_fixtures import (  # noqa: E402,F401
    current_user,
    fake_favorites,
    fake_service,
    notifier,
    setup_sessions,
    chat_settings,
)
