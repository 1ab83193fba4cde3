"""
Per-domain authorization gates.
"""

from .admin_dashboard import AdminDashboardGate
from .base import BaseGate, ensure_identifier
from .file import FileGate, parse_file_path
from .notification import NotificationGate
from .organization import OrganizationGate
from .post import PostGate
from .project import ProjectGate
from .subscription import SubscriptionGate
from .user import UserGate

__all__ = [
    "AdminDashboardGate",
    "BaseGate",
    "FileGate",
    "NotificationGate",
    "OrganizationGate",
    "PostGate",
    "ProjectGate",
    "SubscriptionGate",
    "UserGate",
    "ensure_identifier",
    "parse_file_path",
]
