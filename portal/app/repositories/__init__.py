"""Data access layer"""

from portal.app.repositories.draft_repository import DraftStore, InMemoryDraftStore, RedisDraftStore

__all__ = ['DraftStore', 'InMemoryDraftStore', 'RedisDraftStore']
