"""
Task list backend: a small PostgreSQL-backed task repository and demo runner
"""

__version__ = "1.0.0"
