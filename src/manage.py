"""Storefront database management CLI.

Creates or drops the SQL tables of the Ordering and Payments domains. Domains
whose providers are in-memory are reported and skipped.

Usage:
    python src/manage.py setup-db                     # Every domain
    python src/manage.py drop-db --domain payments    # One domain
"""

import argparse


def _domains():
    from ordering.domain import ordering
    from payments.domain import payments

    return {"ordering": ordering, "payments": payments}


DOMAIN_NAMES = ("ordering", "payments")


def run(command: str, names=None) -> dict[str, list[str]]:
    """Apply ``setup-db`` or ``drop-db`` to the named domains (default: all).

    Returns the SQL providers touched per domain.
    """
    from shared.db import drop_db, setup_db

    action, verb = {"setup-db": (setup_db, "created"), "drop-db": (drop_db, "dropped")}[command]
    domains = _domains()
    touched = {}

    for name in names or DOMAIN_NAMES:
        domain = domains[name]
        domain.init()
        providers = action(domain)
        touched[name] = providers
        if providers:
            print(f"{name}: schema {verb} on {', '.join(providers)}")
        else:
            print(f"{name}: no SQL providers, nothing to do")

    return touched


def main(argv=None):
    domain_option = argparse.ArgumentParser(add_help=False)
    domain_option.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        nargs="*",
        help="Restrict the command to these domains (default: all)",
    )

    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", parents=[domain_option], help="Create all database tables")
    subparsers.add_parser("drop-db", parents=[domain_option], help="Drop all database tables")

    args = parser.parse_args(argv)
    run(args.command, args.domain)


if __name__ == "__main__":
    main()
