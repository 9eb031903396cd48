"""Tests for batch worker count resolution"""
import logging

from git_worktree_keeper.config import DEFAULT_CONCURRENCY
from git_worktree_keeper.utils.concurrency import MAX_CONCURRENCY, get_worker_count


class TestWorkerCount:
    """Test worker count resolution"""

    def test_default(self):
        assert get_worker_count() == DEFAULT_CONCURRENCY

    def test_user_value(self):
        assert get_worker_count(2) == 2

    def test_capped(self):
        assert get_worker_count(1000) == MAX_CONCURRENCY

    def test_never_more_than_items(self):
        assert get_worker_count(10, item_count=3) == 3
        assert get_worker_count(None, item_count=1) == 1

    def test_cap_is_logged(self, caplog):
        caplog.set_level(logging.DEBUG)

        assert get_worker_count(100) == MAX_CONCURRENCY

        assert f"Requested 100 workers, capped at {MAX_CONCURRENCY}" in caplog.text

    def test_no_cap_message_within_limit(self, caplog):
        caplog.set_level(logging.DEBUG)

        get_worker_count(MAX_CONCURRENCY)

        assert "capped" not in caplog.text
