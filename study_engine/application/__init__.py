"""Application layer: services orchestrating ingestion and study set generation."""
