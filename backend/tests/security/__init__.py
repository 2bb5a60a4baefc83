"""Security tests for the archive access backend

This module contains security-focused tests including:
- Authentication bypass attempts
- Privilege escalation between roles
- SQL injection prevention
"""
