"""
calltrace - fetch calls to selected contract functions from the BigQuery
Ethereum trace dataset.
"""

__version__ = "0.1.0"
