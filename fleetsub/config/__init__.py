"""
Configuration classes for each runtime environment.
"""
