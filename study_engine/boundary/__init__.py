"""
Boundary layer.

Adapters for external providers (text generation, embeddings) and the
relational store.
"""
