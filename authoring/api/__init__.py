from .client import MarketplaceApiError, MarketplaceClient

__all__ = ['MarketplaceApiError', 'MarketplaceClient']
