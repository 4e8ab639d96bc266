"""Member account closure and suspension polling."""

import time
from dataclasses import dataclass

from botocore.exceptions import BotoCoreError, ClientError

from src import console
from src.errors import STEP_CLOSE, STEP_POLL, TeardownError

ACTIVE = "ACTIVE"
SUSPENDED = "SUSPENDED"
PENDING_CLOSURE = "PENDING_CLOSURE"


@dataclass
class Account:
    id: str
    name: str
    email: str
    status: str

    @classmethod
    def from_api(cls, account):
        return cls(
            id=account["Id"],
            name=account.get("Name", ""),
            email=account.get("Email", ""),
            status=account.get("Status", "UNKNOWN"),
        )


def list_active_accounts(org_client):
    """Return every ACTIVE account in the organization, in listing order."""
    accounts = []
    paginator = org_client.get_paginator("list_accounts")
    for page in paginator.paginate():
        for account in page["Accounts"]:
            if account.get("Status") == ACTIVE:
                accounts.append(Account.from_api(account))
    return accounts


def list_closable_accounts(org_client, management_account_id):
    try:
        accounts = list_active_accounts(org_client)
    except (ClientError, BotoCoreError) as e:
        raise TeardownError(STEP_CLOSE, f"Failed to list accounts: {e}") from e
    return [a for a in accounts if a.id != management_account_id]


def close_account(org_client, account):
    console.progress(f"Closing account {account.name} ({account.id})...")
    try:
        org_client.close_account(AccountId=account.id)
    except (ClientError, BotoCoreError) as e:
        raise TeardownError(STEP_CLOSE, f"Failed to close account {account.name} ({account.id}): {e}") from e
    console.success(f"Successfully initiated closure for account {account.name} ({account.id})")


def close_all_member_accounts(org_client, management_account_id, delay=15):
    """Close every active account except the management account.

    Returns the closure batch: the IDs closure was requested for, in order.
    """
    accounts = list_closable_accounts(org_client, management_account_id)
    if not accounts:
        console.info("No member accounts found.")
        return []

    batch = []
    for account in accounts:
        close_account(org_client, account)
        batch.append(account.id)
        time.sleep(delay)
    return batch


def get_account_status(org_client, account_id):
    try:
        response = org_client.describe_account(AccountId=account_id)
    except (ClientError, BotoCoreError) as e:
        raise TeardownError(STEP_POLL, f"Failed to describe account {account_id}: {e}") from e
    return response["Account"]["Status"]


def await_suspension(org_client, batch, max_attempts=30, interval=30):
    """Poll the batch until every account is SUSPENDED or attempts run out.

    Returns True when all accounts are suspended. A timeout only warns.
    """
    for attempt in range(max_attempts):
        all_suspended = True
        for account_id in batch:
            status = get_account_status(org_client, account_id)
            console.info(f"Account {account_id} status: {status} (attempt {attempt + 1}/{max_attempts})")
            if status != SUSPENDED:
                all_suspended = False

        if all_suspended:
            console.success("All member accounts have been suspended")
            return True

        if attempt + 1 < max_attempts:
            console.info("Waiting for all accounts to be suspended...")
            time.sleep(interval)

    console.warning("Timeout waiting for accounts to be suspended")
    return False
