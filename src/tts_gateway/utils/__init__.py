"""
Utility Modules for tts-gateway.

    - timeit.py: Performance measurement utilities
"""
