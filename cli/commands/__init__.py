"""
tokenctl command groups.
"""
