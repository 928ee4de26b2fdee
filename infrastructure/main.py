import monocdk as core

from monocdk import (
    aws_s3,
    aws_lambda,
    aws_iam,
    aws_stepfunctions,
    aws_stepfunctions_tasks,
)

from infrastructure.utils import (
    PYTHON_3_12,
    Stack,
    build_path_to_lambdas,
    python_312_function_bundling_options,
)

# Error classes raised by face_index.handler
FACE_INDEX_ERRORS = [
    "KeyDecodingError",
    "InvalidEventError",
    "EmptyResultError",
    "ConfigurationError",
    "FaceIndexError",
]


class FaceIndexStack(Stack):
    def __init__(
        self, scope: core.Construct, id: str, collection: str = "faces", **kwargs
    ):
        super().__init__(scope, id, **kwargs)

        # Bucket where photo are uploaded
        uploaded_photo_bucket = aws_s3.Bucket(
            self,
            "uploaded-photo",
            removal_policy=core.RemovalPolicy.DESTROY,
        )

        rekognition_code = aws_lambda.Code.from_asset(
            path=build_path_to_lambdas("rekognition"),
            bundling=python_312_function_bundling_options,
        )

        face_index_function = aws_lambda.Function(
            self,
            "FaceIndex",
            code=rekognition_code,
            handler="face_index.handler",
            runtime=PYTHON_3_12,
            environment={"REKOGNITION_COLLECTION_ID": collection},
            timeout=core.Duration.seconds(30),
        )
        uploaded_photo_bucket.grant_read(face_index_function)
        face_index_function.add_to_role_policy(
            statement=aws_iam.PolicyStatement(
                effect=aws_iam.Effect.ALLOW,
                actions=["rekognition:IndexFaces"],
                resources=[
                    f"arn:aws:rekognition:{self.region}:{self.account}:collection/{collection}"
                ],
            )
        )

        # The handler reads the parameters by field name, external_image_id is optional
        face_index_task = aws_stepfunctions_tasks.LambdaInvoke(
            self,
            "Face index",
            lambda_function=face_index_function,
            payload=aws_stepfunctions.TaskInput.from_json_path_at("$.parameters"),
            payload_response_only=True,
            result_path="$.FaceIndex",
            output_path="$.FaceIndex",
        )
        for error in FACE_INDEX_ERRORS:
            face_index_task.add_catch(
                errors=[error],
                result_path="$.ErrorInfo",
                handler=aws_stepfunctions.Fail(
                    self,
                    f"Failed with {error}",
                    error=error,
                    cause="The face index function raised an error.",
                ),
            )

        step_function = aws_stepfunctions.StateMachine(
            scope=self,
            id="StateFunction",
            definition=face_index_task,
            tracing_enabled=True,
            state_machine_type=aws_stepfunctions.StateMachineType.EXPRESS,
        )

        self.add_outputs(
            {
                "FaceIndexFunctionName": face_index_function.function_name,
                "UploadedPhotoBucketName": uploaded_photo_bucket.bucket_name,
                "StateMachineArn": step_function.state_machine_arn,
            }
        )
