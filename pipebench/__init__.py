"""
pipebench -- NuSMV benchmark for stream-processing pipelines

Builds finite-state models of small stream-processing pipelines, generates
the CTL/LTL property to check on each of them, and drives NuSMV to measure
how expensive the verification is.
"""

__version__ = "0.1.0"
