"""
SSM Parameter Store source — pages through get_parameters_by_path().

Fetches every parameter recursively under a path, following NextToken until
the store reports no more pages. Throttled pages are retried with exponential
backoff; any other failure is raised as SourceFetchError for the path.
"""

import logging
import time
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ssm_config_builder.base_source import CallContext, Parameter, ParameterSource
from ssm_config_builder.errors import SourceFetchError

logger = logging.getLogger(__name__)


class SsmParameterStore(ParameterSource):
    """
    ParameterSource backed by AWS Systems Manager Parameter Store.

    Usage:
        store = SsmParameterStore(region="us-west-2")
        params = store.fetch_parameters_under_path("/app/schema")
    """

    MAX_PAGE_SIZE = 10   # get_parameters_by_path hard limit for MaxResults
    MAX_RETRIES = 3      # Per-page retry attempts on throttling
    THROTTLING_CODES = frozenset({"ThrottlingException", "TooManyUpdates"})

    def __init__(
        self,
        region: str,
        with_decryption: bool = False,
        page_size: int = MAX_PAGE_SIZE,
        client: Any = None,
    ) -> None:
        if not 1 <= page_size <= self.MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {self.MAX_PAGE_SIZE}")
        self._region = region
        self._with_decryption = with_decryption
        self._page_size = page_size
        self._ssm = client if client is not None else boto3.client("ssm", region_name=region)

    def fetch_parameters_under_path(
        self, path: str, context: Optional[CallContext] = None
    ) -> list[Parameter]:
        """
        Collect all parameters recursively under path, sorted by name.

        Raises:
            SourceFetchError: On a non-retryable error, exhausted retries,
                an expired deadline or a cancelled context
        """
        params: list[Parameter] = []
        next_token: Optional[str] = None
        pages = 0

        while True:
            self._check_context(path, context)
            response = self._get_page(path, next_token)
            pages += 1

            for raw in response.get("Parameters", []):
                params.append(Parameter(name=raw["Name"], value=raw["Value"]))

            next_token = response.get("NextToken")
            if not next_token:
                break

        params.sort(key=lambda p: p.name)
        logger.info(
            "Fetched %d parameters under %s (%d pages)", len(params), path, pages
        )
        return params

    def _check_context(self, path: str, context: Optional[CallContext]) -> None:
        if context is None:
            return
        if context.cancelled.is_set():
            raise SourceFetchError(path, RuntimeError("call cancelled"))
        if context.expired():
            raise SourceFetchError(path, TimeoutError("deadline exceeded"))

    def _get_page(self, path: str, next_token: Optional[str]) -> dict[str, Any]:
        """
        Fetch one page, retrying throttled calls with backoff: 1s, 2s, 4s.

        Returns:
            Raw get_parameters_by_path response dict
        """
        request: dict[str, Any] = {
            "Path": path,
            "Recursive": True,
            "WithDecryption": self._with_decryption,
            "MaxResults": self._page_size,
        }
        if next_token:
            request["NextToken"] = next_token

        attempt = 0
        while True:
            try:
                return self._ssm.get_parameters_by_path(**request)
            except ClientError as exc:
                code = exc.response.get("Error", {}).get("Code", "")
                if code not in self.THROTTLING_CODES:
                    raise SourceFetchError(path, exc) from exc
                if attempt == self.MAX_RETRIES:
                    logger.error(
                        "get_parameters_by_path %s still throttled after %d retries: %s",
                        path,
                        self.MAX_RETRIES,
                        exc,
                    )
                    raise SourceFetchError(path, exc) from exc
            except BotoCoreError as exc:
                raise SourceFetchError(path, exc) from exc

            wait = 2**attempt
            attempt += 1
            logger.warning(
                "get_parameters_by_path %s throttled (retry %d/%d) — waiting %ds",
                path,
                attempt,
                self.MAX_RETRIES,
                wait,
            )
            time.sleep(wait)
