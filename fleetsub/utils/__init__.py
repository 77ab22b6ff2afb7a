"""
Shared helpers: auth decorators, entitlement gates, dates.
"""
