"""
capfilter HTTP API
"""
