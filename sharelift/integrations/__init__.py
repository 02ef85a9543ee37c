"""
Framework integrations for sharelift.

Available integrations:
- fastapi: HTTP trigger router and application factory

Usage:
    from sharelift.integrations.fastapi import create_app

    app = create_app()
"""

from sharelift.integrations._base import (
    CORRELATION_ID_HEADER,
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
)

__all__ = [
    "CORRELATION_ID_HEADER",
    "correlation_scope",
    "generate_correlation_id",
    "get_correlation_id",
]
