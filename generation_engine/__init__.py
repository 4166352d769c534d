"""TrendWise Generation Engine.

Turns ranked `TopicCandidate` objects into publishable `GeneratedContent`
records via a generative text backend, then hands them to an article store.
"""

from .content_generator import ContentGenerator
from .models import GeneratedContent, GenerationOptions, SeoMetadata
from .orchestrator import BatchReport, GenerationOrchestrator

__all__ = [
    "BatchReport",
    "ContentGenerator",
    "GeneratedContent",
    "GenerationOptions",
    "GenerationOrchestrator",
    "SeoMetadata",
]

__version__ = "0.1.0"
