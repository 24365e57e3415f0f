"""
Sigil - Key handling and the signing primitive.
"""
