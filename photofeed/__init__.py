"""
PhotoFeed - photo sharing feed API and client
"""
__version__ = "1.0.0"
