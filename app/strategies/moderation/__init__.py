"""Template moderation: publication state machine and quality review."""

from app.strategies.moderation.publisher import TemplatePublisher
from app.strategies.moderation.review import QualityReport, is_valid_price, review_template_quality
from app.strategies.moderation.state_machine import PublicationAction, next_status

__all__ = [
    "TemplatePublisher",
    "QualityReport",
    "is_valid_price",
    "review_template_quality",
    "PublicationAction",
    "next_status",
]
