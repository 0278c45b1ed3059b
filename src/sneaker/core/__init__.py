"""Core domain package for sneaker.

Core contains the capture decision pipeline (silent mode, bot filtering,
capture-list matching, and same-day deduplication) without any mail, storage,
or framework-specific code, keeping the business logic portable.
"""
