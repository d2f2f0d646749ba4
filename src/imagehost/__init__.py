"""Image hosting service package."""

__version__ = "1.0.0"
__author__ = "Bharat kumar"
__description__ = (
    "Serverless image hosting with per-owner deduplication and storage quotas "
    "on AWS Lambda and DynamoDB"
)

__all__ = ["handlers", "core"]
