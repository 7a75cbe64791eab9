"""Adapters that connect the core ports to SQLite, HTTP and Telegram."""
