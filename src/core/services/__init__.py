"""Sync engine services.

Validation, retry policy, secret retrieval, terminator resolution/upsert and
the orchestrator that sequences them.
"""
