"""
Mongo Query - Client-side query execution for MongoDB

Decodes free-form query options into typed options,
compiles them into a store-native find, and materializes the result
cursor into an in-memory list of documents.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
