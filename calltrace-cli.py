#!/usr/bin/env python3
"""
Fetch contract calls from the BigQuery Ethereum trace dataset

Usage: calltrace-cli.py [options]

Runs calltrace from a source checkout without installing it.
"""

import os
import sys

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from calltrace.main import main


if __name__ == '__main__':
    sys.exit(main())
