"""HTTP clients for the plugin pages."""
from .grading_page import GradingPageClient, ServiceCallError

__all__ = ["GradingPageClient", "ServiceCallError"]
