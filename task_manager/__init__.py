"""
Task manager service: user accounts with token sessions and per-user tasks.
"""

__version__ = "1.0.0"
