"""
Word inversion package.

- inverter: Pure functions for cache key normalization, boundary-preserving
  reversal, and re-dressing cached cores with a token's punctuation.
- transformer: Per-sentence orchestration over the word cache.
"""
