"""
Foods collection query service.
"""
