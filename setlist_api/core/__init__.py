"""
Core utilities shared across the Setlist Manager API.

This package hosts:
- configuration helpers (env vars, TTLs, secrets)
- cross-cutting services such as logging, the mailer adapter,
  password hashing and session credential signing
- the error taxonomy raised by every service

Services depend on these primitives instead of reading os.environ or
talking to SMTP directly.
"""
