"""Optional prose annotator for council timelines."""

from rce.annotator.annotator import Annotation, TimelineAnnotator
from rce.annotator.client import OpenRouterClient, OpenRouterError, OpenRouterMissingAPIKeyError
from rce.annotator.config import AnnotatorCredentials, load_annotator_credentials

__all__ = [
    "Annotation",
    "AnnotatorCredentials",
    "OpenRouterClient",
    "OpenRouterError",
    "OpenRouterMissingAPIKeyError",
    "TimelineAnnotator",
    "load_annotator_credentials",
]
