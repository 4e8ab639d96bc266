"""CLI entrypoint for AWS Organization teardown."""

import argparse
import sys

from botocore.exceptions import BotoCoreError, ClientError
from colorama import init

from src import console
from src.account_closer import await_suspension, close_all_member_accounts, list_closable_accounts
from src.config import DEFAULT_CONFIG_PATH, apply_defaults, load_config, merge_cli_overrides, validate_config
from src.delegated_admins import deregister_all_delegated_admins, discover_delegations
from src.errors import TeardownError
from src.session import get_client, get_session, preflight


def run_teardown(session, config):
    """Deregister delegated admins, close member accounts, and wait for suspension."""
    retries = config["retries"]
    delays = config["delays"]
    polling = config["polling"]

    console.progress("Starting AWS Organization cleanup...")
    identity = preflight(session, get_client(session, "sts", retries))
    management_account_id = identity["account_id"]
    console.info(f"Management account: {management_account_id} ({identity['arn']})")

    org_client = get_client(session, "organizations", retries)

    console.progress("Step 1: Deregistering delegated administrators...")
    deregister_all_delegated_admins(org_client, delay=delays["deregister_seconds"])

    console.progress("Step 2: Closing member accounts...")
    batch = close_all_member_accounts(org_client, management_account_id, delay=delays["close_seconds"])

    if batch:
        console.progress("Monitoring account closure status...")
        await_suspension(
            org_client,
            batch,
            max_attempts=polling["max_attempts"],
            interval=polling["interval_seconds"],
        )

    console.success("AWS Organization cleanup completed successfully")
    console.progress(
        f"Note: The management account ({management_account_id}) must be closed manually through the AWS Console"
    )
    console.progress(
        "Please ensure all member accounts are fully suspended before proceeding with management account closure"
    )
    return batch


def run_dry_run(session, config):
    """List what a teardown would change without changing anything."""
    retries = config["retries"]

    console.progress("--- DRY RUN ---")
    identity = preflight(session, get_client(session, "sts", retries))
    management_account_id = identity["account_id"]
    console.info(f"Management account: {management_account_id} ({identity['arn']})")

    org_client = get_client(session, "organizations", retries)

    delegations = discover_delegations(org_client)
    if delegations:
        console.info("Delegated administrators to deregister:")
        for account_id, service_principal in delegations:
            console.info(f"  - {account_id}: {service_principal}")
    else:
        console.info("No delegated administrators found.")

    accounts = list_closable_accounts(org_client, management_account_id)
    if accounts:
        console.info("Accounts to close:")
        for account in accounts:
            console.info(f"  - {account.name} ({account.id}) [{account.email}]")
    else:
        console.info("No member accounts found.")

    console.info("No changes will be made.")
    return delegations, accounts


def main(argv=None):
    """Parse CLI arguments and run the teardown."""
    parser = argparse.ArgumentParser(
        description="Deregister delegated administrators and close every member account of an AWS Organization",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to config file")
    parser.add_argument("--profile", help="AWS profile for the management account")
    parser.add_argument("--role-arn", help="Role ARN to assume in the management account (alternative to profile)")
    parser.add_argument("--region", help="AWS region for API clients")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be changed without changing it")

    args = parser.parse_args(argv)

    init(autoreset=True)

    config = load_config(args.config)
    config = merge_cli_overrides(config, {"profile": args.profile, "role_arn": args.role_arn, "region": args.region})
    config = validate_config(apply_defaults(config))

    try:
        session = get_session(
            profile_name=config.get("profile"),
            role_arn=config.get("role_arn"),
            region_name=config["region"],
        )
        if args.dry_run:
            run_dry_run(session, config)
        else:
            run_teardown(session, config)
    except TeardownError as e:
        console.error(f"Step '{e.step}' failed: {e.message}")
        sys.exit(1)
    except (ClientError, BotoCoreError) as e:
        console.error(f"AWS API call failed: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        console.error("Interrupted")
        sys.exit(1)


if __name__ == "__main__":
    main()
