"""Discovery and deregistration of delegated administrators."""

import time

from botocore.exceptions import BotoCoreError, ClientError

from src import console
from src.errors import STEP_DEREGISTER, TeardownError


def list_delegated_admin_accounts(org_client):
    """Return the account IDs registered as delegated administrators."""
    account_ids = []
    paginator = org_client.get_paginator("list_delegated_administrators")
    for page in paginator.paginate():
        for admin in page["DelegatedAdministrators"]:
            account_ids.append(admin["Id"])
    return account_ids


def list_delegated_services(org_client, account_id):
    """Return the service principals delegated to an account."""
    principals = []
    paginator = org_client.get_paginator("list_delegated_services_for_account")
    for page in paginator.paginate(AccountId=account_id):
        for service in page["DelegatedServices"]:
            principals.append(service["ServicePrincipal"])
    return principals


def deregister_admin(org_client, account_id, service_principal):
    console.progress(f"Deregistering account {account_id} for service {service_principal}")
    try:
        org_client.deregister_delegated_administrator(AccountId=account_id, ServicePrincipal=service_principal)
    except (ClientError, BotoCoreError) as e:
        raise TeardownError(
            STEP_DEREGISTER, f"Failed to deregister {account_id} for {service_principal}: {e}"
        ) from e
    console.success(f"Successfully deregistered {account_id} for {service_principal}")


def discover_delegations(org_client):
    """Return every (account_id, service_principal) pair currently delegated."""
    try:
        pairs = []
        for account_id in list_delegated_admin_accounts(org_client):
            for service_principal in list_delegated_services(org_client, account_id):
                pairs.append((account_id, service_principal))
        return pairs
    except (ClientError, BotoCoreError) as e:
        raise TeardownError(STEP_DEREGISTER, f"Failed to list delegated administrators: {e}") from e


def deregister_all_delegated_admins(org_client, delay=2):
    """Deregister every delegated administrator for every service.

    All pairs are discovered before the first deregistration. Pauses
    ``delay`` seconds after each one. The first failure raises TeardownError
    and nothing further is attempted.
    """
    delegations = discover_delegations(org_client)
    if not delegations:
        console.info("No delegated administrators found.")
        return []

    for account_id, service_principal in delegations:
        deregister_admin(org_client, account_id, service_principal)
        time.sleep(delay)

    return delegations
