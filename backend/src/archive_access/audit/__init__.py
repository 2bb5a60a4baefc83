"""Audit log service"""
