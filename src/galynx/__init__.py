"""Galynx desktop core: session, request executor and realtime loop"""

__version__ = "0.1.0"
