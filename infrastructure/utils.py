import os

import monocdk as core
from monocdk import aws_lambda


def build_path_to_lambdas(path):
    return os.path.join("lambdas", path)


PYTHON_3_12 = aws_lambda.Runtime(
    "python3.12",
    aws_lambda.RuntimeFamily.PYTHON,
    supports_inline_code=True,
    bundling_docker_image="public.ecr.aws/sam/build-python3.12",
)

python_312_function_bundling_options = core.BundlingOptions(
    image=PYTHON_3_12.bundling_docker_image,
    command=[
        "bash",
        "-c",
        "\n        pip install -r requirements.txt -t /asset-output &&\n        cp -au . /asset-output\n        ",
    ],
)


class Stack(core.Stack):
    def __init__(self, scope: core.Construct, id: str, **kwargs) -> None:
        super().__init__(scope, id, **kwargs)

    def add_outputs(self, outputs: dict) -> None:
        for name, value in outputs.items():
            core.CfnOutput(self, name, value=value)
