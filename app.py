#!/usr/bin/env python3
import os

import monocdk as core

from infrastructure.main import FaceIndexStack

app = core.App()

FaceIndexStack(
    app,
    "FaceIndexStack",
    collection=os.environ.get("REKOGNITION_COLLECTION_ID", "faces"),
)

app.synth()
