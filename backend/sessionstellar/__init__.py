"""
SessionStellar: scores AI-assisted work sessions from their transcripts.
Provides signal extraction and scoring functionality.
"""

__version__ = "0.1.0"

from .engine import ScoringEngine, WeightProvider, DEFAULT_WEIGHTS, score_session
from .errors import InputTooLarge, ValidationError
from .extractor import SignalExtractor
from .parser import MAX_INPUT_BYTES, detect_format, parse_session_file, sanitize
from .records import parse_records
from .signals import (
    DecisionPoint,
    ErrorRecovery,
    SessionMetadata,
    OrchestrationSignals,
    ScoringMetrics,
    ScoringWeights,
    SessionScore,
    QualityTier,
    ScoreBand,
)

__all__ = [
    'ScoringEngine',
    'WeightProvider',
    'DEFAULT_WEIGHTS',
    'score_session',
    'InputTooLarge',
    'ValidationError',
    'SignalExtractor',
    'MAX_INPUT_BYTES',
    'detect_format',
    'parse_session_file',
    'sanitize',
    'parse_records',
    'DecisionPoint',
    'ErrorRecovery',
    'SessionMetadata',
    'OrchestrationSignals',
    'ScoringMetrics',
    'ScoringWeights',
    'SessionScore',
    'QualityTier',
    'ScoreBand',
]
