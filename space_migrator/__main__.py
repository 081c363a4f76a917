#!/usr/bin/env python3
"""
Main execution module for the Space to Teams migration tool
"""

from space_migrator.cli.commands import main

if __name__ == "__main__":
    main()
