"""Video scopes: histogram, waveform and vectorscope."""

from gradekit.scopes.analyzer import ScopeAnalyzer, ScopeState
from gradekit.scopes.apply import compute_histogram, compute_scopes, compute_vectorscope, compute_waveform
from gradekit.scopes.result import HistogramResult, ScopeSample, VectorscopeResult, WaveformResult

__all__ = [
    "compute_histogram",
    "compute_waveform",
    "compute_vectorscope",
    "compute_scopes",
    "HistogramResult",
    "WaveformResult",
    "VectorscopeResult",
    "ScopeSample",
    "ScopeAnalyzer",
    "ScopeState",
]
