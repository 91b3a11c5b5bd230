"""
Process-level runtime: builds and tears down the tracker context
"""
