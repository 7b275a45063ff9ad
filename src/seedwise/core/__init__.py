"""Core processing package for seedwise."""

from .injector import TorrentInjector
from .labels import LabelManager
from .models import (
    InjectionResult,
    Metafile,
    PrefilterResult,
    ProcessorStats,
    Searchee,
    SearcheeFile,
    TimestampAggregate,
)
from .prefilter import (
    filter_all_by_content,
    filter_by_content,
    filter_dupes,
    filter_timestamps,
)
from .processor import SeedwiseCore
from .registry import get_core, init_core

__all__ = [
    "InjectionResult",
    "LabelManager",
    "Metafile",
    "PrefilterResult",
    "ProcessorStats",
    "Searchee",
    "SearcheeFile",
    "SeedwiseCore",
    "TimestampAggregate",
    "TorrentInjector",
    "filter_all_by_content",
    "filter_by_content",
    "filter_dupes",
    "filter_timestamps",
    "get_core",
    "init_core",
]
