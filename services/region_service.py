"""
Region service resolving the current-region data lookup.
"""
import boto3
from typing import Dict, Optional
from botocore.exceptions import ClientError
from config import get_config
from logger_config import get_logger
from utils.exceptions import RegionLookupError

logger = get_logger(__name__)


class RegionService:
    """Service answering what ``data.aws_region.current`` evaluates to."""

    def __init__(self, region_name: Optional[str] = None):
        """
        Initialize region service.

        Args:
            region_name: Region to use; resolved from the boto3 session or
                the config when not given
        """
        self._region_name = region_name
        self._ec2_client = None

    @property
    def name(self) -> str:
        """Region name: explicit, then boto3 session, then config."""
        if not self._region_name:
            self._region_name = (
                boto3.session.Session().region_name or get_config().aws_region
            )
        return self._region_name

    @property
    def ec2_client(self):
        """Lazy initialization of EC2 client."""
        if self._ec2_client is None:
            self._ec2_client = boto3.client('ec2', region_name=self.name)
        return self._ec2_client

    def describe(self) -> Dict[str, str]:
        """
        Look up the region's attributes.

        Returns:
            Dictionary with name and endpoint

        Raises:
            RegionLookupError: If the region is unknown or the lookup fails
        """
        try:
            response = self.ec2_client.describe_regions(
                RegionNames=[self.name], AllRegions=True
            )
        except ClientError as e:
            logger.error(f'Region lookup failed for {self.name}: {str(e)}')
            raise RegionLookupError(
                f'Could not look up region {self.name}: {str(e)}', self.name
            ) from e

        regions = response.get('Regions', [])
        if not regions:
            raise RegionLookupError(f'Unknown region {self.name}', self.name)

        region = regions[0]
        logger.debug(f'Resolved region {region["RegionName"]}')
        return {
            'name': region['RegionName'],
            'endpoint': region.get('Endpoint', ''),
        }
