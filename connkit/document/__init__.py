"""
Document store package: MongoDB clients via pymongo.
"""

from .factory import mongo_client_kwargs, open_document, create_document_client

__all__ = [
    'mongo_client_kwargs',
    'open_document',
    'create_document_client',
]
