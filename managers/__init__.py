"""
Collection managers: one module per document store collection.
"""
