from topicfeed.search.base import ArticleSearcher
from topicfeed.search.newsapi import NewsAPISearcher

__all__ = [
    "ArticleSearcher",
    "NewsAPISearcher",
]
