# Path: core/__init__.py
# Purpose: Package initializer for the labelscan core layer.
# Layer: core.
# Details: Aggregates subpackages for enhancement, regions, recognition, aggregation, extraction, and vector stores.
