"""Pydantic schemas for the BizAdvisor API.

Defines request and response contracts for chat, conversations,
Telegram identities, accounts, file attachments, analytics trends and
the business catalog.
"""

from pydantic import BaseModel, ConfigDict, Field

from src.services.context_merger import BusinessContext
from src.services.output_extractor import TableSpec


class ContextFilters(BaseModel):
    """Business context fields; omitted fields leave stored values alone."""

    user_role: str | None = Field(
        default=None, description="owner, marketer, accountant or beginner"
    )
    business_stage: str | None = Field(
        default=None, description="startup, stable or scaling"
    )
    goal: str | None = Field(
        default=None,
        description="increase_revenue, reduce_costs, hire_staff, launch_ads or legal_help",
    )
    urgency: str | None = Field(default=None, description="urgent, normal or planning")
    region: str | None = None
    business_niche: str | None = None

    def to_context(self) -> BusinessContext:
        return BusinessContext.from_object(self)


# === Chat ===


class ChatRequest(BaseModel):
    """One user message to the advisor."""

    message: str = Field(default="", description="User message text")
    user_id: str = Field(default="", description="Account id, Telegram id or handle")
    category: str | None = None
    business_type: str | None = None
    conversation_id: str | None = None
    output_format: str | None = Field(default=None, description="xlsx or csv")
    table: TableSpec | None = None
    language: str | None = Field(default=None, description="en or ru")
    context_filters: ContextFilters | None = None


class FileAttachmentResponse(BaseModel):
    """Generated file as returned to clients."""

    id: str
    filename: str
    mime: str
    size: int
    content_base64: str | None = None
    download_url: str | None = None


class ChatResponse(BaseModel):
    response: str
    message_id: str
    timestamp: str
    conversation_id: str
    title: str | None = None
    files: list[FileAttachmentResponse] | None = None


# === Conversations ===


class CreateConversationRequest(BaseModel):
    user_id: str
    title: str | None = None
    context: ContextFilters | None = None


class CreateConversationResponse(BaseModel):
    conversation_id: str
    created_at: str


class ConversationSummary(BaseModel):
    id: str
    user_id: str
    title: str | None = None
    created_at: str
    context: ContextFilters | None = None


class ConversationListResponse(BaseModel):
    user_id: str
    conversations: list[ConversationSummary]


class MessageRecord(BaseModel):
    id: str
    role: str
    content: str
    timestamp: str


class MessageAttachments(BaseModel):
    message_id: str
    files: list[FileAttachmentResponse]


class ConversationHistoryResponse(BaseModel):
    conversation_id: str
    messages: list[MessageRecord]
    count: int
    attachments: list[MessageAttachments]


class ConversationOwner(BaseModel):
    user_id: str


class RenameConversationRequest(BaseModel):
    user_id: str
    title: str | None = None


class ConversationStatusResponse(BaseModel):
    status: str
    conversation_id: str


# === Telegram identities ===


class CreateTelegramUserRequest(BaseModel):
    telegram_user_id: int
    telegram_username: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class TelegramUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    telegram_user_id: int
    telegram_username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    created_at: str
    user_id: str | None = Field(default=None, validation_alias="account_id")


class LinkTelegramUserRequest(BaseModel):
    user_id: str | None = None


class ResolvedIdentityResponse(BaseModel):
    raw_id: str
    user_id: str


# === Accounts ===


class AccountProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    business_type: str
    created_at: str
    full_name: str | None = None
    nickname: str | None = None
    phone: str | None = None
    country: str | None = None
    gender: str | None = None
    telegram_username: str | None = None
    user_role: str | None = None
    business_stage: str | None = None
    business_niche: str | None = None
    region: str | None = None


class UpdateProfileRequest(BaseModel):
    """Profile edit; only provided, non-null fields are applied."""

    business_type: str | None = None
    full_name: str | None = None
    nickname: str | None = None
    phone: str | None = None
    country: str | None = None
    gender: str | None = None
    telegram_username: str | None = None
    user_role: str | None = None
    business_stage: str | None = None
    business_niche: str | None = None
    region: str | None = None


class TokenStatusResponse(BaseModel):
    valid: bool
    message: str


class ExistsResponse(BaseModel):
    exists: bool


# === Analytics ===


class TopTrendResponse(BaseModel):
    name: str
    percent_change: float | None = None
    description: str | None = None
    why_popular: str | None = None
    created_at: str


class TopTrendUpsertRequest(BaseModel):
    """Leading trend update; texts are stored for the request's locale."""

    name: str
    percent_change: float | None = None
    description: str | None = None
    why_popular: str | None = None


class PopularityTrendResponse(BaseModel):
    name: str
    direction: str
    percent_change: float | None = None
    notes: str | None = None
    created_at: str


class PopularityTrendUpsertRequest(BaseModel):
    name: str
    direction: str = Field(description="growing or decreasing")
    percent_change: float | None = None
    notes: str | None = None


class StatusResponse(BaseModel):
    status: str


# === Business catalog ===


class CategoryResponse(BaseModel):
    id: str
    name: str
    description: str
    icon: str


class CategoryListResponse(BaseModel):
    categories: list[CategoryResponse]


class ResourceResponse(BaseModel):
    title: str
    type: str
    description: str


class ResourceListResponse(BaseModel):
    category: str
    resources: list[ResourceResponse]
