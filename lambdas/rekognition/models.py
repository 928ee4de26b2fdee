from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class IndexFaceEvent(BaseModel):
    """
    Invocation payload of the face index function. The object key arrives
    URL-encoded, the way S3 notifications and the state machine forward it.
    """

    model_config = ConfigDict(populate_by_name=True)

    bucket: str = Field(alias="s3Bucket")
    key: str = Field(alias="s3Key")
    external_image_id: Optional[str] = Field(default=None, alias="externalImageId")


class BoundingBox(BaseModel):
    """
    Represents the bounding box of a face, as returned by AWS Rekognition.
    """

    Height: float
    Left: float
    Top: float
    Width: float


class IndexedFace(BaseModel):
    """The first face Rekognition indexed from the photo."""

    BoundingBox: BoundingBox
    Confidence: float
    FaceId: str
    ImageId: str
