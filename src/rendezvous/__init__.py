"""Rendezvous relay for exchanging peer connection offers and answers."""

__version__ = "0.1.0"
