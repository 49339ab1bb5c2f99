from src.config.settings import config

__all__ = ["config"]
