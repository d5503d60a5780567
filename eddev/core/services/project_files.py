"""
Static files laid over a new environment.

Two template trees ship with eddev:

    data/copy-to-ddev/     → <root>/.ddev/   (container configuration)
    data/copy-to-project/  → <root>/         (.env, app config)

When DynamoDB is requested, a DynamoDB Local service is added to the
DDEV compose setup and the session store settings are appended to .env.
"""

from __future__ import annotations

from pathlib import Path

import yaml

DATA_DIR = Path(__file__).resolve().parents[2] / "data"
PROJECT_TEMPLATE = DATA_DIR / "copy-to-project"
DDEV_TEMPLATE = DATA_DIR / "copy-to-ddev"

DYNAMODB_COMPOSE_FILE = "docker-compose.dynamodb.yaml"
DYNAMODB_IMAGE = "amazon/dynamodb-local:latest"
DYNAMODB_PORT = 8000

DYNAMODB_ENV: dict[str, str] = {
    "AWS_DYNAMODB_ENDPOINT": f"http://dynamodb:{DYNAMODB_PORT}",
    "AWS_DYNAMODB_SESSION_TABLE": "sessions",
    "AWS_REGION_NAME": "ap-southeast-2",
    "AWS_ACCESS_KEY": "local",
    "AWS_SECRET_KEY": "local",
}


def dynamodb_compose() -> str:
    """docker-compose fragment adding DynamoDB Local to the DDEV project."""
    service = {
        "services": {
            "dynamodb": {
                "container_name": "ddev-${DDEV_SITENAME}-dynamodb",
                "image": DYNAMODB_IMAGE,
                "command": "-jar DynamoDBLocal.jar -sharedDb -inMemory",
                "restart": "no",
                "expose": [str(DYNAMODB_PORT)],
                "labels": {
                    "com.ddev.site-name": "${DDEV_SITENAME}",
                    "com.ddev.approot": "${DDEV_APPROOT}",
                },
            },
        },
    }
    header = "#ddev-generated\n# Written by eddev create --include-dynamodb\n"
    return header + yaml.dump(service, default_flow_style=False, sort_keys=False)


def project_env(include_dynamodb: bool = False) -> str:
    """Content of the project's .env file."""
    content = (PROJECT_TEMPLATE / ".env").read_text(encoding="utf-8")
    if include_dynamodb:
        if not content.endswith("\n"):
            content += "\n"
        content += "".join(f'{key}="{value}"\n' for key, value in DYNAMODB_ENV.items())
    return content
