"""
Dropbox authentication and token persistence.

Reuses tokens stored in a local JSON file across restarts. When no token is
stored yet, either runs the interactive OAuth code flow (if app credentials
are configured) or falls back to the API token from the environment.
"""

import json
import os
from typing import Callable, Dict, Optional

import dropbox
from dropbox import DropboxOAuth2FlowNoRedirect


class AuthError(Exception):
    """Raised when no usable Dropbox credential can be obtained."""


def read_tokens(file_path: str) -> Dict[str, str]:
    """Read persisted tokens.

    Args:
        file_path: Path of the token storage file

    Returns:
        Token dictionary, empty if the file is missing or unreadable
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            tokens = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, json.JSONDecodeError) as e:
        print(f"[!] Could not read auth tokens from {file_path}: {e}")
        return {}

    if not isinstance(tokens, dict):
        print(f"[!] Ignoring malformed auth token file {file_path}")
        return {}
    return {str(k): str(v) for k, v in tokens.items() if v}


def write_tokens(file_path: str, tokens: Dict[str, str]) -> None:
    """Persist tokens, creating the parent directory if needed.

    Args:
        file_path: Path of the token storage file
        tokens: Token dictionary to write
    """
    directory = os.path.dirname(file_path)
    if directory and not os.path.isdir(directory):
        os.makedirs(directory, mode=0o700, exist_ok=True)

    fd = os.open(file_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        json.dump(tokens, f)


def run_oauth_flow(app_key: str, app_secret: str, prompt: Callable[[str], str] = input) -> Dict[str, str]:
    """Exchange an authorization code entered by the user for tokens.

    Args:
        app_key: Dropbox app key
        app_secret: Dropbox app secret
        prompt: Function reading the authorization code

    Returns:
        Token dictionary with accessToken and, if granted, refreshToken
    """
    flow = DropboxOAuth2FlowNoRedirect(app_key, app_secret, token_access_type="offline")

    print(f"1. Go to {flow.start()}")
    print('2. Click "Allow" (you might have to log in first).')
    print("3. Copy the authorization code.")
    try:
        code = prompt("Enter the authorization code here: ").strip()
    except (EOFError, KeyboardInterrupt) as e:
        raise AuthError(f"authorization code scan failed: {e!r}") from e
    if not code:
        raise AuthError("authorization code scan failed: no code entered")

    try:
        result = flow.finish(code)
    except Exception as e:
        raise AuthError(f"authorization token exchange failed: {e}") from e

    tokens = {"accessToken": result.access_token}
    if result.refresh_token:
        tokens["refreshToken"] = result.refresh_token
    return tokens


def init_dropbox_client(token_storage: str, api_token: str,
                        app_key: Optional[str] = None, app_secret: Optional[str] = None,
                        prompt: Callable[[str], str] = input) -> dropbox.Dropbox:
    """Build an authenticated Dropbox handle.

    Args:
        token_storage: Path of the token storage file
        api_token: API token from the environment, used when nothing is stored
        app_key: Optional Dropbox app key enabling the OAuth flow
        app_secret: Optional Dropbox app secret enabling the OAuth flow
        prompt: Function reading the authorization code

    Returns:
        Dropbox SDK handle ready for API calls

    Raises:
        AuthError: If the token exchange or persistence fails
    """
    tokens = read_tokens(token_storage)

    if not tokens.get("accessToken"):
        if app_key and app_secret:
            tokens = run_oauth_flow(app_key, app_secret, prompt)
        elif api_token:
            tokens = {"accessToken": api_token}
        else:
            raise AuthError("no stored token, API token or app credentials available")

        try:
            write_tokens(token_storage, tokens)
        except OSError as e:
            raise AuthError(f"writing auth tokens to disk failed: {e}") from e
        print(f"[i] Stored auth tokens in {token_storage}")
    else:
        print(f"[i] Using stored auth tokens from {token_storage}")

    if tokens.get("refreshToken") and app_key:
        return dropbox.Dropbox(
            oauth2_access_token=tokens["accessToken"],
            oauth2_refresh_token=tokens["refreshToken"],
            app_key=app_key,
            app_secret=app_secret,
        )
    return dropbox.Dropbox(oauth2_access_token=tokens["accessToken"])
