#!/usr/bin/env python3
"""
Command-line wrapper for the ticketfee package.
Equivalent to the installed `ticketfee` console script.
"""

from ticketfee.cli import main

if __name__ == "__main__":
    main()
