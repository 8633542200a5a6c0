"""Object-storage client seam and implementations."""

from ossfs_core.store.boto3_client import Boto3OssClient, build_boto3_client
from ossfs_core.store.client import ObjectStorageClient

__all__ = ["Boto3OssClient", "ObjectStorageClient", "build_boto3_client"]
