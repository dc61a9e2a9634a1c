"""Product catalog service.

Categories and products served over REST (FastAPI) and gRPC from one
relational store.
"""

__version__ = "0.1.0"
