"""
Command-line interface for hostlink.
"""
