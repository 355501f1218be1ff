# Path: core/__init__.py
# Purpose: Package initializer for core application layer.
# Layer: core.
# Details: Aggregates Qt-free subpackages for models, pagination, uploads, deletion, spatial mapping, and the backend client.
