"""Dual-mode (persistent server / serverless) bootstrap for a FastAPI app."""

__version__ = "0.1.0"
