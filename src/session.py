import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from src.errors import STEP_PREFLIGHT, TeardownError


def get_session(profile_name=None, role_arn=None, region_name="us-east-1", session_name="org-teardown"):
    if profile_name:
        return boto3.Session(profile_name=profile_name, region_name=region_name)
    if role_arn:
        sts = boto3.client("sts", region_name=region_name)
        try:
            response = sts.assume_role(RoleArn=role_arn, RoleSessionName=session_name)
        except (ClientError, BotoCoreError) as e:
            raise TeardownError(STEP_PREFLIGHT, f"Could not assume role {role_arn}: {e}") from e
        credentials = response["Credentials"]
        return boto3.Session(
            aws_access_key_id=credentials["AccessKeyId"],
            aws_secret_access_key=credentials["SecretAccessKey"],
            aws_session_token=credentials["SessionToken"],
            region_name=region_name,
        )
    return boto3.Session(region_name=region_name)


def build_client_config(retries):
    """Build the botocore client config carrying the retry mode and attempt ceiling.

    ``max_attempts`` counts the first call, as AWS_MAX_ATTEMPTS does.
    """
    return Config(retries={"mode": retries["mode"], "total_max_attempts": retries["max_attempts"]})


def get_client(session, service_name, retries):
    return session.client(service_name, config=build_client_config(retries))


def get_caller_identity(sts_client):
    response = sts_client.get_caller_identity()
    return {
        "account_id": response["Account"],
        "arn": response["Arn"],
    }


def preflight(session, sts_client):
    """Confirm credentials resolve to a caller identity before anything is changed.

    Returns the identity dict of the management account.
    """
    if session.get_credentials() is None:
        raise TeardownError(STEP_PREFLIGHT, "AWS credentials are not configured")
    try:
        return get_caller_identity(sts_client)
    except (ClientError, BotoCoreError) as e:
        raise TeardownError(STEP_PREFLIGHT, f"AWS credentials are not configured or are invalid: {e}") from e
