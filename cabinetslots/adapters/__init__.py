"""
Adapters layer - External integrations (clinic CRM API).
"""

from .crm_client import CRMClient
from .mock_crm_client import MockCRMClient

__all__ = ["CRMClient", "MockCRMClient"]
