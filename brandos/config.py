from pydantic import BaseModel
import os

class Settings(BaseModel):
    data_dir: str = os.getenv("DATA_DIR", "public/data")
    db_path: str = os.getenv("DB_PATH", "data/brandos.db")
    redis_url: str = os.getenv("REDIS_URL", "redis://redis:6379/0")
    user_agent: str = os.getenv("USER_AGENT", "Mozilla/5.0 (compatible; BOSContentBot/1.0)")
    request_timeout: float = float(os.getenv("REQUEST_TIMEOUT", "10"))
    fetch_concurrency: int = int(os.getenv("FETCH_CONCURRENCY", "8"))

    perplexity_api_key: str = os.getenv("PERPLEXITY_API_KEY", "").strip()
    perplexity_url: str = os.getenv("PERPLEXITY_URL", "https://api.perplexity.ai/chat/completions")
    anthropic_api_key: str = os.getenv("ANTHROPIC_API_KEY", "").strip()
    anthropic_url: str = os.getenv("ANTHROPIC_URL", "https://api.anthropic.com/v1/messages")
    anthropic_version: str = os.getenv("ANTHROPIC_VERSION", "2023-06-01")
    pexels_api_key: str = os.getenv("PEXELS_API_KEY", "").strip()
    llm_timeout: float = float(os.getenv("LLM_TIMEOUT", "120"))

    admin_password: str = os.getenv("ADMIN_PASSWORD", "admin123")
    og_cache_ttl: int = int(os.getenv("OG_CACHE_TTL", "3600"))

    target_news_count: int = int(os.getenv("TARGET_NEWS_COUNT", "12"))
    target_ideas_per_category: int = int(os.getenv("TARGET_IDEAS_PER_CATEGORY", "5"))
    target_featured_articles: int = int(os.getenv("TARGET_FEATURED_ARTICLES", "3"))
    texture_count: int = int(os.getenv("TEXTURE_COUNT", "13"))


settings = Settings()
