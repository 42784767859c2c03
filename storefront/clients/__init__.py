from .google_oauth_client import GoogleOAuthClient

__all__ = ["GoogleOAuthClient"]
