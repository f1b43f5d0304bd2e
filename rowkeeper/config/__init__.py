from rowkeeper.config.settings import settings

__all__ = ["settings"]
