"""Keyword index."""
from .tfidf import TfIdfIndex, tokenize

__all__ = ["TfIdfIndex", "tokenize"]
