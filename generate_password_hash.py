#!/usr/bin/env python3
"""
Admin password hash generator.
Prints the ADMIN_PASSWORD_HASH line for the .env file.
"""
import getpass
import sys

from portfolio_site.utils.auth import hash_password


def main() -> int:
    print("Portfolio CMS admin password hash generator")
    print("Copy the output to your .env file as ADMIN_PASSWORD_HASH")
    print()

    password = getpass.getpass("Enter admin password: ")
    if not password:
        print("Error: Password cannot be empty", file=sys.stderr)
        return 1

    if password != getpass.getpass("Confirm password: "):
        print("Error: Passwords do not match", file=sys.stderr)
        return 1

    print(f"ADMIN_PASSWORD_HASH={hash_password(password)}")
    print()
    print("Keep this hash secret and never commit it to version control.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
