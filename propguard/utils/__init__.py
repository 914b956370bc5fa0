"""
Utility functions module.

Time Semantics:
- Callers pass the evaluation instant explicitly wherever a result depends on it
- Wall-clock UTC time is only a fallback when no instant is supplied
- Naive datetimes and dates are interpreted as UTC
"""
