"""
lingocard: on-demand SVG stats cards for language learning profiles.

Pipeline:
  client (fetch) -> normalize -> aggregate -> assets -> render
"""

__version__ = "0.3.0"
