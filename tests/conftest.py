"""Shared pytest fixtures for the face index function."""

from unittest import mock

import boto3
import pytest
from botocore.stub import Stubber

COLLECTION = "faces"

FACE = {
    "FaceId": "f1",
    "BoundingBox": {"Width": 0.3, "Height": 0.4, "Left": 0.2, "Top": 0.1},
    "ImageId": "i1",
    "Confidence": 99.5,
}


@pytest.fixture
def rekognition_client():
    return boto3.client(
        "rekognition",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubber(rekognition_client):
    with Stubber(rekognition_client) as stub:
        yield stub
        stub.assert_no_pending_responses()


@pytest.fixture
def fake_client():
    client = mock.Mock()
    client.index_faces.return_value = {"FaceRecords": [{"Face": dict(FACE)}]}
    return client


class FakeContext:
    def __init__(self, remaining_ms=30000):
        self.remaining_ms = remaining_ms

    def get_remaining_time_in_millis(self):
        return self.remaining_ms
