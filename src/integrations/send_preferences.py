"""
Send Preferences Lookup Module

This module fetches per-recipient sending preferences and public keys from
the preferences Lambda function using the boto3 Lambda client.

Usage:
    from integrations import send_preferences

    preferences = await send_preferences.get(
        ["alice@example.com", "bob@example.org"],
        message,
        suppress_errors=True  # Omit failing addresses instead of raising
    )
    print(preferences["alice@example.com"].encrypt)
"""

import asyncio
import json
import logging
import os
import time
from typing import Any, Dict, Optional, Sequence

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from domain.models import PreferenceMap, PreferenceRecord

# Configure logging
logger = logging.getLogger(__name__)


# ============================================================================
# Custom Exception Classes
# ============================================================================

class ConfigurationError(Exception):
    """Raised when module configuration is invalid or missing."""
    pass


class PreferenceFunctionNotFound(Exception):
    """Raised when the preferences Lambda function cannot be found."""
    pass


class ThrottlingException(Exception):
    """Raised when Lambda invocations are throttled."""
    pass


class PreferenceLookupError(Exception):
    """Raised when the preferences function fails for an address."""
    pass


class ValidationException(Exception):
    """Raised when input validation fails."""
    pass


# ============================================================================
# Module-Level Configuration and Initialization
# ============================================================================

def _read_function_name() -> str:
    """
    Read and validate SEND_PREFERENCES_FUNCTION from environment variables.

    Returns:
        str: The preferences function name or ARN

    Raises:
        ConfigurationError: If SEND_PREFERENCES_FUNCTION is missing
    """
    function_name = os.environ.get('SEND_PREFERENCES_FUNCTION')

    if not function_name:
        raise ConfigurationError(
            "SEND_PREFERENCES_FUNCTION environment variable is required but not set. "
            "Please configure this in your SAM template or Lambda environment."
        )

    logger.info(f"Send preferences function configured: {function_name}")
    return function_name


def _initialize_lambda_client():
    """
    Initialize boto3 Lambda client with timeout configuration.

    Returns:
        boto3.client: Configured Lambda client
    """
    # No retries: a failing address is reported as failed, not retried
    client_config = Config(
        retries={
            'max_attempts': 0,
            'mode': 'standard'
        },
        connect_timeout=5,
        read_timeout=15,
        max_pool_connections=20  # One connection per concurrent address lookup
    )

    region = os.environ.get('AWS_REGION', os.environ.get('AWS_DEFAULT_REGION', 'us-west-2'))

    client = boto3.client(
        'lambda',
        region_name=region,
        config=client_config
    )

    logger.info(
        f"Lambda client initialized: region={region}, "
        f"connect_timeout=5s, read_timeout=15s, max_attempts=0 (no retries)"
    )
    return client


# Initialize at module import time (reused across lookups)
try:
    SEND_PREFERENCES_FUNCTION = _read_function_name()
    KEYS_FUNCTION = os.environ.get('KEYS_FUNCTION', SEND_PREFERENCES_FUNCTION)
    lambda_client = _initialize_lambda_client()
except ConfigurationError as e:
    logger.error(f"Module initialization failed: {e}")
    raise


# ============================================================================
# Lambda Invocation
# ============================================================================

def _invoke(function_name: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Invoke a Lambda function synchronously and decode its JSON response.

    Raises:
        PreferenceFunctionNotFound: If the function doesn't exist
        ThrottlingException: If the invocation was throttled
        PreferenceLookupError: If the function raised or returned invalid JSON
        ClientError: For other AWS service errors
    """
    try:
        response = lambda_client.invoke(
            FunctionName=function_name,
            InvocationType='RequestResponse',
            Payload=json.dumps(payload)
        )
    except ClientError as e:
        error_code = e.response.get('Error', {}).get('Code', 'Unknown')
        error_message = e.response.get('Error', {}).get('Message', str(e))

        # Map AWS errors to domain-specific exceptions
        if error_code == 'ResourceNotFoundException':
            logger.error(f"Function not found: {function_name}, error={error_message}")
            raise PreferenceFunctionNotFound(
                f"Function not found: {function_name}. "
                f"Verify the function exists and is deployed. Error: {error_message}"
            )
        elif error_code in ('ThrottlingException', 'TooManyRequestsException'):
            logger.error(f"Request throttled: {error_message}")
            raise ThrottlingException(f"Request throttled by Lambda service: {error_message}")
        else:
            logger.error(
                f"Invocation failed: error_code={error_code}, "
                f"error_message={error_message}, function={function_name}"
            )
            raise

    body = response['Payload'].read()

    if response.get('FunctionError'):
        raise PreferenceLookupError(
            f"Function {function_name} returned error: {body[:200]!r}"
        )

    try:
        return json.loads(body) if body else {}
    except json.JSONDecodeError as json_err:
        raise PreferenceLookupError(
            f"Failed to parse response from {function_name}: {json_err}"
        )


def _message_id(context: Any) -> Optional[str]:
    """Extract the message ID from the composed message, if any."""
    if context is None:
        return None
    if isinstance(context, dict):
        return context.get('ID')
    return getattr(context, 'message_id', None)


def fetch_send_preferences(address: str, context: Any = None) -> PreferenceRecord:
    """
    Fetch sending preferences for a single address (blocking).

    Args:
        address: Recipient email address
        context: Message being composed (dict with 'ID' or object with message_id)

    Returns:
        PreferenceRecord for the address
    """
    data = _invoke(SEND_PREFERENCES_FUNCTION, {
        'action': 'sendPreferences',
        'email': address,
        'messageId': _message_id(context),
    })
    return PreferenceRecord.from_dict(address, data)


def fetch_public_keys(address: str) -> Dict[str, Any]:
    """
    Fetch the public keys of a single address (blocking).

    Returns:
        Dict with 'Code' (API response code) and 'Keys'
    """
    return _invoke(KEYS_FUNCTION, {'action': 'keys', 'email': address})


async def get_public_keys(address: str) -> Dict[str, Any]:
    """Async wrapper around fetch_public_keys, for use as a KeyCache fetcher."""
    return await asyncio.to_thread(fetch_public_keys, address)


async def get(
    addresses: Sequence[str],
    context: Any = None,
    suppress_errors: bool = True
) -> PreferenceMap:
    """
    Fetch sending preferences for a batch of addresses concurrently.

    Args:
        addresses: Recipient addresses (duplicates are looked up once)
        context: Message being composed
        suppress_errors: If True, addresses whose lookup fails are left out
                         of the result instead of raising

    Returns:
        Dict mapping address -> PreferenceRecord for every successful lookup

    Raises:
        ValidationException: If addresses is not a list or tuple
        Any lookup error, when suppress_errors is False
    """
    if not isinstance(addresses, (list, tuple)):
        raise ValidationException(
            f"addresses must be a list or tuple. Got: {type(addresses).__name__}"
        )

    start_time = time.time()
    unique = list(dict.fromkeys(addresses))

    results = await asyncio.gather(
        *(asyncio.to_thread(fetch_send_preferences, address, context) for address in unique),
        return_exceptions=suppress_errors
    )

    preferences: PreferenceMap = {}
    for address, result in zip(unique, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.warning(f"Failed to fetch send preferences for {address}: {result}")
            continue
        preferences[address] = result

    execution_time = time.time() - start_time
    logger.info(
        f"Fetched send preferences: {len(preferences)}/{len(unique)} address(es), "
        f"execution_time={execution_time:.2f}s"
    )
    return preferences
