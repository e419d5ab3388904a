"""Core domain package for the TICS AI assistant.

Core contains admission, rate limiting, and the query pipeline without any
Telegram or HTTP-specific code, keeping the business logic portable.
"""
