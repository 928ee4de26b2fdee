import logging
import os
import re

from urllib.parse import unquote_plus
import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from models import IndexFaceEvent, IndexedFace


def log_level():
    return os.environ.get("LOG_LEVEL", "INFO").upper()


logger = logging.getLogger(__name__)
logger.setLevel(log_level())

REGION = os.environ.get("REKOGNITION_REGION", os.environ.get("AWS_REGION", "us-east-1"))

# Refuse to start a call with less invocation time left than this
DEADLINE_MARGIN_MS = 500

client = boto3.client(
    "rekognition",
    region_name=REGION,
    config=Config(
        connect_timeout=float(os.environ.get("REKOGNITION_CONNECT_TIMEOUT", "5")),
        read_timeout=float(os.environ.get("REKOGNITION_READ_TIMEOUT", "10")),
        retries={"total_max_attempts": 1},
    ),
)

_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class KeyDecodingError(ValueError):
    pass


class InvalidEventError(ValueError):
    pass


class FaceIndexError(Exception):
    pass


class ConfigurationError(FaceIndexError):
    pass


class EmptyResultError(FaceIndexError):
    pass


def decode_key(encoded):
    """
    Undo the form encoding S3 applies to object keys: ``+`` is a space and
    ``%XX`` a UTF-8 byte. Stray ``%`` signs are rejected instead of being
    passed through as ``unquote_plus`` would.
    """
    match = _MALFORMED_ESCAPE.search(encoded)
    if match:
        raise KeyDecodingError(
            f"failed to decode S3 key: invalid URL escape {encoded[match.start():match.start() + 3]!r}"
        )
    try:
        return unquote_plus(encoded, errors="strict")
    except UnicodeDecodeError as e:
        raise KeyDecodingError(f"failed to decode S3 key: {e}") from e


def _check_deadline(context):
    if context is None:
        return
    remaining = context.get_remaining_time_in_millis()
    if remaining <= DEADLINE_MARGIN_MS:
        raise FaceIndexError(
            f"failed to index new face: only {remaining}ms left in the invocation"
        )


def index_face(event, collection_id, rekognition=client, context=None):
    try:
        request = IndexFaceEvent.model_validate(event)
    except ValidationError as e:
        raise InvalidEventError(f"invalid event: {e}") from e

    key = decode_key(request.key)
    _check_deadline(context)

    params = {
        "CollectionId": collection_id,
        "Image": {"S3Object": {"Bucket": request.bucket, "Name": key}},
    }
    if request.external_image_id is not None:
        params["ExternalImageId"] = request.external_image_id

    logger.info(
        "Indexing faces of s3://%s/%s into collection '%s'",
        request.bucket,
        key,
        collection_id,
    )

    # Index the faces
    try:
        response = rekognition.index_faces(**params)
    except (ClientError, BotoCoreError) as e:
        logger.error("IndexFaces failed for s3://%s/%s: %s", request.bucket, key, e)
        if not collection_id:
            raise ConfigurationError(
                f"failed to index new face: REKOGNITION_COLLECTION_ID is not set ({e})"
            ) from e
        raise FaceIndexError(f"failed to index new face: {e}") from e

    for unindexed in response.get("UnindexedFaces", []):
        logger.warning(
            "Face not indexed from s3://%s/%s: %s",
            request.bucket,
            key,
            ", ".join(unindexed.get("Reasons", [])),
        )

    if not response.get("FaceRecords"):
        logger.error("IndexFaces returned no face for s3://%s/%s", request.bucket, key)
        raise EmptyResultError("failed to index new face: no face detected on the photo")

    try:
        face = IndexedFace.model_validate(response["FaceRecords"][0]["Face"])
    except ValidationError as e:
        logger.error("IndexFaces returned an incomplete face for s3://%s/%s", request.bucket, key)
        raise FaceIndexError(f"failed to index new face: incomplete face record ({e})") from e

    return face.model_dump()


def handler(event, context):
    collection_id = os.environ.get("REKOGNITION_COLLECTION_ID", "")

    return index_face(event, collection_id, rekognition=client, context=context)
