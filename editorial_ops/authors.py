from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from .articles import ArticleLike, active_articles, as_article


def corr_author(article: ArticleLike) -> Dict[str, Optional[str]]:
    """Corresponding author of an article: the first author that lists an email."""
    article = as_article(article)
    for author in article.get("authors") or []:
        email = (author.get("email") or "").strip()
        if email:
            return {"corr_author": author.get("name"), "email": email}
    raise ValueError(f"Article {article.get('id')!r} has no author with an email address")


def corr_authors(articles: Optional[Iterable[ArticleLike]] = None) -> List[Dict[str, Any]]:
    if articles is None:
        articles = active_articles()
    out = []
    for item in articles:
        article = as_article(item)
        out.append({"id": article.get("id"), **corr_author(article)})
    return out
