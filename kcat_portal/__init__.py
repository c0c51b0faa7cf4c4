"""Client-side orchestration for enzyme kcat lookup and prediction."""

__version__ = "0.1.0"
