"""Commit atomicity check.

This package provides:
- analysis: analyze_file_relatedness, analyze_message
- atomicity: analyze_with_llm, check_commit_atomicity
- models: LLMAnalysis, AtomicityReport
"""

from fission.check.analysis import analyze_file_relatedness, analyze_message
from fission.check.atomicity import analyze_with_llm, check_commit_atomicity
from fission.check.models import AtomicityReport, LLMAnalysis


__all__ = [
    "analyze_file_relatedness",
    "analyze_message",
    "analyze_with_llm",
    "check_commit_atomicity",
    "AtomicityReport",
    "LLMAnalysis",
]
