"""ideaforge - stream project ideas from hosted or self-hosted LLMs."""

__version__ = "0.1.0"
