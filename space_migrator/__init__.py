#!/usr/bin/env python3
"""
JetBrains Space to Microsoft Teams migration tool
"""

__version__ = "0.1.0"

from space_migrator.core.config import load_config

# Import the main classes for easier access
from space_migrator.core.exporter import Exporter
from space_migrator.core.migrator import TeamsMigrator
from space_migrator.core.retry import RetryBudget, call_with_retry
from space_migrator.core.timestamps import TimestampDeduplicator
