"""
Core business logic for ski coaching and resort weather.

This module is framework-agnostic - it doesn't import FastAPI or any
AI vendor SDK. External services are reached through the Protocols
declared here and implemented in `skipro.infrastructure`.
"""
