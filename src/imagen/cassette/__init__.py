"""
Cassette module for Imagen.

This module records real generator traffic to YAML cassettes and replays
it deterministically, so tests and demos run without network access or
API keys.

How it works:
    1. RecordingImageGenerator wraps a live generator and appends every
       request/outcome pair to a cassette, rewriting the file after each call
    2. CassetteStore writes cassettes atomically and validates them on read
    3. ReplayingImageGenerator serves the recorded outcomes back in order

Example:
    from imagen.cassette import ReplayingImageGenerator

    generator = ReplayingImageGenerator.from_path("fixtures/cat.cassette.yaml")
    response = await generator.generate(request)
"""

from imagen.cassette.recorder import RecordingImageGenerator
from imagen.cassette.replayer import ReplayCursor, ReplayingImageGenerator
from imagen.cassette.store import CASSETTE_SUFFIX, CassetteStore, dump_cassette, load_cassette_text

__all__ = [
    "CASSETTE_SUFFIX",
    "CassetteStore",
    "RecordingImageGenerator",
    "ReplayCursor",
    "ReplayingImageGenerator",
    "dump_cassette",
    "load_cassette_text",
]
