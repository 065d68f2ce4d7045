from .bus import NotificationBus
from .refresh import RefreshWatcher

__all__ = ["NotificationBus", "RefreshWatcher"]
