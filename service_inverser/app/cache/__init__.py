"""
Word cache package.

The in-memory tier holds the entire durable vocabulary for the life of the
process; there is no eviction. Writes land in memory first and are persisted
asynchronously through the write-back queue.
"""
