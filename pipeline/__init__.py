"""
Field Journal Ingestion Pipeline Package.

External collaborators of the entry store: the image classification
provider and the image blob store.

ARCHITECTURE RULES:
- pipeline/ modules may import from utils/, config, errors, logging_config
- pipeline/ modules MUST NOT import from core/ or web/
"""
