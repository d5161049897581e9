"""
Core infrastructure: configuration, database, security, validation and errors.
"""
