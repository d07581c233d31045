"""
Cross-app test suite for the farm operations backend.
"""
