"""
Word Inverser service.
"""
