from typing import List, Optional

import httpx

from src.news_briefing.providers.base_provider import BaseNewsProvider
from src.news_briefing.providers.newsapi_provider import NewsAPIProvider
from src.news_briefing.providers.guardian_provider import GuardianProvider
from src.news_briefing.providers.nyt_provider import NYTProvider
from src.utils.config import Settings


def build_default_providers(
    settings: Settings,
    client: Optional[httpx.AsyncClient] = None,
) -> List[BaseNewsProvider]:
    """Adapters for every source whose API key is configured, in fixed order."""
    timeout = settings.PROVIDER_TIMEOUT_SECONDS
    providers: List[BaseNewsProvider] = []

    if settings.NEWS_API_KEY:
        providers.append(NewsAPIProvider(
            api_key=settings.NEWS_API_KEY,
            base_url=settings.NEWS_API_BASE_URL,
            timeout=timeout,
            client=client,
        ))
    if settings.GUARDIAN_API_KEY:
        providers.append(GuardianProvider(api_key=settings.GUARDIAN_API_KEY, timeout=timeout, client=client))
    if settings.NYT_API_KEY:
        providers.append(NYTProvider(api_key=settings.NYT_API_KEY, timeout=timeout, client=client))

    return providers


__all__ = [
    "BaseNewsProvider",
    "NewsAPIProvider",
    "GuardianProvider",
    "NYTProvider",
    "build_default_providers",
]
