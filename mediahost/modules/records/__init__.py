"""
Records Module

Persisted documents that reference hosted assets, and the store used to
write asset URLs into them.
"""

from mediahost.modules.records.models import AdCampaign, Article, MediaType, CampaignStatus
from mediahost.modules.records.repositories import RecordStore, SQLModelRecordStore

__all__ = [
    "AdCampaign",
    "Article",
    "MediaType",
    "CampaignStatus",
    "RecordStore",
    "SQLModelRecordStore",
]
