"""
Interactive Google OAuth 2.0 authorization for the Photos Library API.

The browser is sent to Google's consent page and redirected back to a
one-shot loopback server on ``http://localhost:<redirect_port>/``, which
``google_auth_oauthlib`` runs for the duration of the handshake.
"""
import logging

from google_auth_oauthlib.flow import InstalledAppFlow

from flickr_to_google_photos.config import GooglePhotosConfig
from flickr_to_google_photos.exceptions import AuthenticationError, ConfigurationError
from flickr_to_google_photos.uploader.google_photos import SCOPES, save_credentials

logger = logging.getLogger(__name__)

AUTH_URI = 'https://accounts.google.com/o/oauth2/auth'
TOKEN_URI = 'https://oauth2.googleapis.com/token'

AUTHORIZATION_PROMPT = (
    'Please visit this URL to authorize Flickr to Google Photos Transfer:\n{url}'
)
SUCCESS_MESSAGE = (
    'Authentication successful! You can close this window and return to the terminal.'
)


def redirect_uri_for(port: int) -> str:
    return f"http://localhost:{port}/"


def build_client_config(config: GooglePhotosConfig) -> dict:
    return {
        'installed': {
            'client_id': config.client_id,
            'client_secret': config.client_secret,
            'auth_uri': AUTH_URI,
            'token_uri': TOKEN_URI,
            'redirect_uris': [redirect_uri_for(config.redirect_port)],
        }
    }


def run_google_oauth(config: GooglePhotosConfig, open_browser: bool = True) -> None:
    """
    Authorize this tool against the user's Google Photos library.

    Opens Google's consent page, waits up to ``config.oauth_timeout_seconds``
    for the single redirect back to the loopback server, exchanges the code
    for tokens and stores them in ``config.token_path`` with owner-only
    permissions.

    Raises:
        ConfigurationError: If the OAuth client id/secret are not configured
        AuthenticationError: If authorization fails, is denied or times out
    """
    if not config.has_client_credentials:
        raise ConfigurationError(
            'Google OAuth client credentials are not configured. '
            'Please run "flickr-to-google setup" first.'
        )

    flow = InstalledAppFlow.from_client_config(build_client_config(config), SCOPES)
    logger.info(f"Waiting for Google authorization on {redirect_uri_for(config.redirect_port)} "
                f"(timeout {config.oauth_timeout_seconds}s)")
    try:
        creds = flow.run_local_server(
            port=config.redirect_port,
            timeout_seconds=config.oauth_timeout_seconds,
            open_browser=open_browser,
            authorization_prompt_message=AUTHORIZATION_PROMPT,
            success_message=SUCCESS_MESSAGE,
            access_type='offline',
            prompt='consent',
        )
    except OSError as e:
        raise AuthenticationError(
            f"Could not listen on port {config.redirect_port} for the OAuth callback: {e}. "
            f"Free the port or change google_photos.redirect_port."
        ) from e
    except Exception as e:
        # No redirect within the timeout leaves the flow without a response URI
        raise AuthenticationError(
            f"Google authorization failed or timed out after "
            f"{config.oauth_timeout_seconds}s: {e}"
        ) from e

    if creds is None:
        raise AuthenticationError('Google authorization returned no credentials')

    save_credentials(creds, config.token_path)
    logger.info(f"✓ Google Photos token saved to {config.token_path}")
