# -*- coding: utf-8 -*-
"""Enumeration types for rtrvr-core data contracts."""

from enum import Enum


class RunMode(str, Enum):
    """Requested execution channel."""

    AUTO = "auto"
    CLOUD = "cloud"
    EXTENSION = "extension"


class SelectedMode(str, Enum):
    """Channel that actually executed a call. Never ``auto``."""

    CLOUD = "cloud"
    EXTENSION = "extension"


class ResponseVerbosity(str, Enum):
    """How much of the execution trace the server returns."""

    FINAL = "final"
    STEPS = "steps"
    DEBUG = "debug"
