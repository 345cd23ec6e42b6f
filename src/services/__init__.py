"""Service layer for BizAdvisor.

Provides identity resolution, conversation persistence, business context
merging, advisor chat orchestration, file attachments and analytics
trends.
"""

from src.services.account_service import AccountService
from src.services.analytics_service import AnalyticsService
from src.services.chat_service import ChatResult, ChatService, ChatTurnRequest
from src.services.context_merger import BusinessContext, merge_contexts
from src.services.context_store import ContextStore
from src.services.conversation_service import ConversationService
from src.services.identity_resolver import IdentityResolver
from src.services.secondary_identity_service import SecondaryIdentityService

__all__ = [
    "AccountService",
    "AnalyticsService",
    "BusinessContext",
    "ChatResult",
    "ChatService",
    "ChatTurnRequest",
    "ContextStore",
    "ConversationService",
    "IdentityResolver",
    "SecondaryIdentityService",
    "merge_contexts",
]
