from .coordinator import CoordinatorStatus, DashboardCoordinator
from .page_sessions import PageSessions

__all__ = ["CoordinatorStatus", "DashboardCoordinator", "PageSessions"]
