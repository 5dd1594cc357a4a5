"""Shapes of the JSON documents the pipeline writes and the API serves.

The pipeline itself passes plain dicts around (`NewsItem`, `IdeaDict`); these
models describe the persisted documents and validate them at the HTTP
boundary. Field aliases keep the camelCase keys the frontend reads.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# Plain-dict aliases used inside the pipeline.
NewsItem = Dict[str, Any]
IdeaDict = Dict[str, Any]

ContentTier = Literal["featured", "summary", "quick"]
NewsType = Literal["weekly-update", "monthly-outlook"]
IdeaCategory = Literal["short-form", "long-form", "blog"]

NEWS_TYPES: List[str] = ["weekly-update", "monthly-outlook"]
IDEA_CATEGORIES: List[str] = ["short-form", "long-form", "blog"]


class _Doc(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SourceLink(_Doc):
    name: str
    url: str


class NewsUpdateItem(_Doc):
    title: str
    description: Optional[str] = None
    timestamp: str
    sources: List[SourceLink] = Field(default_factory=list)
    tier: Optional[ContentTier] = None
    source_url: Optional[str] = Field(default=None, alias="sourceUrl")
    topic_category: Optional[str] = Field(default=None, alias="topicCategory")
    article_path: Optional[str] = Field(default=None, alias="articlePath")
    ai_summary: Optional[str] = Field(default=None, alias="aiSummary")


class NewsData(_Doc):
    type: NewsType
    date: str
    updates: List[NewsUpdateItem] = Field(default_factory=list)


class PlatformTip(_Doc):
    platform: str
    tips: List[str] = Field(default_factory=list)


class VisualDirection(_Doc):
    rating: int = Field(ge=1, le=10)
    description: str


class IdeaItem(_Doc):
    title: str
    description: str
    starred: Optional[bool] = None
    sources: List[SourceLink] = Field(default_factory=list)
    hooks: Optional[List[str]] = None
    platform_tips: Optional[List[PlatformTip]] = Field(default=None, alias="platformTips")
    visual_direction: Optional[VisualDirection] = Field(default=None, alias="visualDirection")
    example_outline: Optional[List[str]] = Field(default=None, alias="exampleOutline")
    hashtags: Optional[str] = None
    pexels_image_url: Optional[str] = Field(default=None, alias="pexelsImageUrl")
    texture_index: Optional[int] = Field(default=None, alias="textureIndex")


class IdeaData(_Doc):
    type: IdeaCategory
    date: str
    ideas: List[IdeaItem] = Field(default_factory=list)


class SourceInfo(_Doc):
    id: str
    name: str
    url: str
    favicon: str = ""
    title: Optional[str] = None


class CitationChip(_Doc):
    primary_source: SourceInfo = Field(alias="primarySource")
    additional_count: int = Field(default=0, alias="additionalCount")
    additional_sources: List[SourceInfo] = Field(default_factory=list, alias="additionalSources")


class SourceCard(_Doc):
    id: str
    name: str
    url: str
    favicon: str = ""
    title: str
    image_url: Optional[str] = Field(default=None, alias="imageUrl")


class DiscoverParagraph(_Doc):
    id: str
    content: str
    citations: List[CitationChip] = Field(default_factory=list)


class DiscoverSection(_Doc):
    id: str
    title: Optional[str] = None
    paragraphs: List[DiscoverParagraph] = Field(default_factory=list)


class DiscoverArticle(_Doc):
    id: str
    slug: str
    title: str
    summary: Optional[str] = None
    published_at: str = Field(alias="publishedAt")
    generated_at: Optional[str] = Field(default=None, alias="generatedAt")
    total_sources: int = Field(default=0, alias="totalSources")
    hero_image_url: Optional[str] = Field(default=None, alias="heroImageUrl")
    sections: List[DiscoverSection] = Field(default_factory=list)
    source_cards: List[SourceCard] = Field(default_factory=list, alias="sourceCards")
    all_sources: List[SourceInfo] = Field(default_factory=list, alias="allSources")
    sidebar_sections: List[str] = Field(default_factory=list, alias="sidebarSections")
    related_articles: List[Dict[str, Any]] = Field(default_factory=list, alias="relatedArticles")


class ManifestEntry(_Doc):
    slug: str
    title: str
    published_at: Optional[str] = Field(default=None, alias="publishedAt")
    total_sources: int = Field(default=0, alias="totalSources")
    hero_image_url: Optional[str] = Field(default=None, alias="heroImageUrl")
    sidebar_sections: List[str] = Field(default_factory=list, alias="sidebarSections")


class ArticleManifest(_Doc):
    generated_at: str = Field(alias="generatedAt")
    articles: List[ManifestEntry] = Field(default_factory=list)


class OGData(_Doc):
    image: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    site_name: Optional[str] = Field(default=None, alias="siteName")
    favicon: Optional[str] = None


class ParagraphSource(_Doc):
    id: str
    name: str
    url: str
    title: Optional[str] = None
    favicon: Optional[str] = None


class ArticleParagraph(_Doc):
    content: str
    sources: List[ParagraphSource] = Field(default_factory=list)


class ArticleSection(_Doc):
    id: str
    title: Optional[str] = None
    paragraphs: List[ArticleParagraph] = Field(default_factory=list)
    image_url: Optional[str] = Field(default=None, alias="imageUrl")


class EnrichedArticle(_Doc):
    sections: List[ArticleSection] = Field(default_factory=list)
    related_queries: List[str] = Field(default_factory=list, alias="relatedQueries")
    all_sources: List[ParagraphSource] = Field(default_factory=list, alias="allSources")


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatIn(BaseModel):
    messages: List[ChatMessage] = Field(default_factory=list)
    model: str = "auto"


class EnrichIn(_Doc):
    title: str = ""
    existing_sources: List[SourceLink] = Field(default_factory=list, alias="existingSources")


class DiscoverSearchIn(_Doc):
    query: str = ""
    max_results: int = Field(default=5, ge=1, le=50, alias="maxResults")
    categories: Optional[List[str]] = None
    include_formatted: bool = Field(default=False, alias="includeFormatted")


class InspoResourceIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="", alias="Name")
    url: str = Field(default="", alias="URL")
    description: Optional[str] = Field(default=None, alias="Description")
    category: Optional[str] = Field(default=None, alias="Category")
    sub_category: Optional[str] = Field(default=None, alias="Sub-category")
    pricing: Optional[str] = Field(default=None, alias="Pricing")
    featured: bool = Field(default=False, alias="Featured")
    open_source: bool = Field(default=False, alias="OpenSource")
