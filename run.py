#!/usr/bin/env python3
"""
glance server

Starts the FastAPI app once the cluster connection has been probed.
"""

from glance.server import main


if __name__ == "__main__":
    main()
