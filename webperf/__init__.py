"""
webperf - static web page audit engine.
"""

__version__ = "1.0.0"
