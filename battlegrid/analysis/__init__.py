"""
Headless balance analysis.
"""
