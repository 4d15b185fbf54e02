"""Customer-support chat backend.

The HTTP app lives in :mod:`supportchat.api.main`; conversation storage,
context building and reply generation live in :mod:`supportchat.chat`.
"""

__version__ = "0.1.0"
