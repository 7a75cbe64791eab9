"""Core domain package for telerelay.

Core contains the fetch, dedup, block and delivery logic without any Telegram,
HTTP or storage-specific code, keeping the business logic portable.
"""
