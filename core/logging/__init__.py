"""
Logging utilities for the Lightning backend.

This package provides:
- Structured JSON logging with correlation IDs
- Sensitive data filtering for PII protection
- Security event logging for policy denials and rate limiting
"""
