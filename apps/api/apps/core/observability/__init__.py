"""
Observability module for Lifeline.

Provides structured logging, domain events, request correlation and
health checks with contact/health data protection.
"""
from .events import log_domain_event
from .logging import get_sanitized_logger

__all__ = ['log_domain_event', 'get_sanitized_logger']
