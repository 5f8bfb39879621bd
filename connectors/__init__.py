"""Connectors module"""
from .sendcloud_client import SendcloudAPIClient

__all__ = ["SendcloudAPIClient"]
