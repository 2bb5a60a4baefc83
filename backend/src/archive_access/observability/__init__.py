"""Observability - logging, request correlation, metrics and health"""
