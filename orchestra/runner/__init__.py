"""
orchestra.runner - Batch runner

Loads execution requests from a file and dispatches them using adapters
configured from settings.
"""

from orchestra.runner.main import load_requests, run_requests

__all__ = ["load_requests", "run_requests"]
