#!/usr/bin/env python3
"""
GitLab authentication check: verifies the configured server and optionally logs a user in
"""

import sys
import getpass
import logging
import argparse

from gitlab_auth.config.settings import ConfigurationStore
from gitlab_auth.services.authentication import GitLabAuthenticator

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(argv=None):
    """Main entry point for the authentication check."""
    parser = argparse.ArgumentParser(description="GitLab authentication check")
    parser.add_argument(
        "--url",
        help="GitLab server URL (overrides GITLAB_URL)"
    )
    parser.add_argument(
        "--username",
        help="Authenticate this user after the connection check"
    )
    parser.add_argument(
        "--password",
        help="Password for --username (prompted for when omitted)"
    )
    parser.add_argument(
        "--skip-connection-check",
        action="store_true",
        help="Do not verify the configured private token"
    )

    args = parser.parse_args(argv)

    try:
        store = ConfigurationStore.from_env()
        if args.url:
            store.update(server_url=args.url)
    except ValueError as e:
        print(f"❌ Configuration error: {e}")
        print("\nEnvironment variables:")
        print("- GITLAB_URL (optional, defaults to https://gitlab.com)")
        print("- GITLAB_TOKEN (required for the connection check)")
        print("- GITLAB_TIMEOUT (optional, seconds, defaults to 10)")
        return 1

    authenticator = GitLabAuthenticator(store)
    logger.info(f"Using GitLab server {store.get().server_url}")

    if not args.skip_connection_check:
        check = authenticator.check_connection()
        if not check.ok:
            print(f"❌ Connection check failed: {check.message}")
            return 1
        print(f"✅ {check.message}")

    if args.username:
        password = args.password
        if password is None:
            password = getpass.getpass(f"Password for {args.username}: ")

        outcome = authenticator.authenticate(args.username, password)
        if not outcome.success:
            print(f"❌ Authentication failed ({outcome.failure.value}): {outcome.message}")
            return 2

        principal = outcome.principal
        print(f"✅ Authenticated {principal.username} (id {principal.id}, {principal.email or 'no email'})")

    return 0


if __name__ == "__main__":
    sys.exit(main())
