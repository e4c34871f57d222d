"""Shared AWS helpers: client factory, waiters, retry and cost estimates."""
