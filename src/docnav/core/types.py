"""Core type definitions."""

from typing import Literal, NewType

# URL path for routing (e.g., "/guides", "/guides/java/jcf")
# Distinct from filesystem Path to catch type mismatches
URLPath = NewType("URLPath", str)

ROOT_PATH = URLPath("/")

Severity = Literal["error", "warning"]
