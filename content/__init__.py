"""
Entity models for the workout content stored in the document store.
"""
