# Client SDK for the Banqa HTTP API

from banqa.client.api_client import ApiError, BanqaApiClient
from banqa.client.transfer_flow import FlowState, TransferFlow, TransferFlowError, TransferOutcome

__all__ = [
    "ApiError",
    "BanqaApiClient",
    "FlowState",
    "TransferFlow",
    "TransferFlowError",
    "TransferOutcome",
]
