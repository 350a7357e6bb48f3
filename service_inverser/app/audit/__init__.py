"""
Request/response audit logging and queries.
"""
