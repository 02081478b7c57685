"""
Disaster Alert - alert status, SOS and safe-place service with its asyncio client
"""
__version__ = "1.0.0"
