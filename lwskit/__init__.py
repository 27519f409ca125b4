"""LeaderWorkerSet API types, apply configurations and llama.cpp group tooling."""

__version__ = "0.1.0"

__all__ = ["api", "applyconfig", "apply", "chat", "blobserver", "leader"]