"""Starlette middleware: request ids + access log, security headers, rate limiting."""
