"""Runtime settings loaded from the Lambda environment."""

import os
from typing import Mapping, Optional

from pydantic import BaseModel

DEFAULT_TABLE_NAME = 'receipt-processor-receipts'
DEFAULT_REGION = 'us-east-1'
DEFAULT_LOCALSTACK_ENDPOINT = 'http://localhost:4566'


class Settings(BaseModel):
    """Receipt processor settings."""

    receipts_table: str = DEFAULT_TABLE_NAME
    region_name: str = DEFAULT_REGION
    use_localstack: bool = False
    localstack_endpoint: str = DEFAULT_LOCALSTACK_ENDPOINT
    log_level: str = 'INFO'

    @property
    def endpoint_url(self) -> Optional[str]:
        """Endpoint override for the DynamoDB client, if any."""
        if self.use_localstack:
            return self.localstack_endpoint
        return None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            Settings instance
        """
        env = os.environ if environ is None else environ

        return cls(
            receipts_table=env.get('RECEIPTS_TABLE') or DEFAULT_TABLE_NAME,
            region_name=env.get('AWS_REGION') or env.get('AWS_DEFAULT_REGION') or DEFAULT_REGION,
            use_localstack=env.get('USE_LOCALSTACK', 'false').lower() == 'true',
            localstack_endpoint=env.get('LOCALSTACK_ENDPOINT') or DEFAULT_LOCALSTACK_ENDPOINT,
            log_level=env.get('LOG_LEVEL', 'INFO').upper()
        )
