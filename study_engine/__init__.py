"""
Study material partitioning and quiz/flashcard generation engine.

Splits study materials into chunks, partitions them by chapter or topic,
generates questions and flashcards in parallel, and removes near-duplicates.
"""

__version__ = "0.1.0"
