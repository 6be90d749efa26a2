"""
capfilter

Compiles structured capture criteria into pcap-filter expressions.
"""

__version__ = "0.1.0"
