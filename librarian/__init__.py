"""
Librarian study pipeline.

Hybrid (BM25 + dense) retrieval over document chunks feeding a validated
generation loop for quiz questions, flashcards and open-ended questions,
plus the early-stopping controller used during fine-tuning.
"""

__version__ = "0.1.0"
