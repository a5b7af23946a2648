"""MedScribe: clinical note -> LLM structured record + summary."""
__version__ = "0.1.0"
