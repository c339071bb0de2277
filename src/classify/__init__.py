"""
Classify - content classification service
Tags text and URLs with an LLM, stores them content-addressably and serves tag queries
"""

__version__ = "1.0.0"
