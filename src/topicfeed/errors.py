"""Exception types raised by TopicFeed components."""


class TopicFeedError(Exception):
    """Base class for TopicFeed errors."""


class UpstreamUnavailableError(TopicFeedError):
    """The news search provider failed, refused the request, or has no key."""


class EnrichmentUnavailableError(TopicFeedError):
    """A translation, summarization, or image collaborator is unavailable."""
