"""
Word Inverser Service package.

The service reverses the interior of every word in a sentence while keeping
boundary punctuation in place, and fronts the computation with a two-tier
word cache:
- In-memory tier: the full vocabulary, preloaded at startup before traffic
- Durable tier: PostgreSQL, populated through a bounded write-back queue

Structure:
- app.main: FastAPI app, routes, and startup/shutdown wiring.
- app.inversion: Pure word inversion and the sentence transformer.
- app.cache: Word cache, write-back queue, and startup preload.
- app.persistence: PostgreSQL access for words and the audit log.
- app.audit: Request/response audit middleware and log queries.
"""
