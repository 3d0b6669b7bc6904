#!/usr/bin/env python3
"""
Issue a development access token for a user identifier.

Usage:
    python scripts/create_access_token.py <user_id>
    python scripts/create_access_token.py --new-secret
"""

import secrets
import sys
from pathlib import Path

# Add parent directory to path so we can import prompt_tools modules
sys.path.insert(0, str(Path(__file__).parent.parent))


def generate_secret_key(length: int = 64) -> str:
    """Cryptographically secure value suitable for SECRET_KEY."""
    return secrets.token_urlsafe(length)


def main() -> None:
    if len(sys.argv) != 2:
        print("Usage: python scripts/create_access_token.py <user_id>")
        print("       python scripts/create_access_token.py --new-secret")
        sys.exit(1)

    if sys.argv[1] == "--new-secret":
        print(f"SECRET_KEY={generate_secret_key()}")
        return

    from prompt_tools.core.config import settings
    from prompt_tools.core.security import create_access_token

    token = create_access_token(sys.argv[1])
    print(f"Access token for {sys.argv[1]} (valid {settings.ACCESS_TOKEN_EXPIRE_MINUTES} minutes):\n")
    print(token)


if __name__ == "__main__":
    main()
