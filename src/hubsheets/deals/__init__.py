"""Deal module -- per-contact deal lookup joined against the pipeline catalog."""

from src.hubsheets.deals.resolver import DealResolver, attach_pipeline

__all__ = ["DealResolver", "attach_pipeline"]
