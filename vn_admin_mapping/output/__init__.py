"""
Output file generation.
"""
