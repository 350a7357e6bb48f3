"""
Persistence package (PostgreSQL via asyncpg).
"""
